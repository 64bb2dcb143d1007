"""
Archive uploader for Rover.

Puts a bundle archive into an S3 bucket using credentials from the
environment.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from rover.errors import RoverError

if TYPE_CHECKING:
    from rover.config import Config

logger = logging.getLogger(__name__)

REQUIRED_ENV_VARS = {
    "AWS_ACCESS_KEY_ID": "Access key ID for AWS",
    "AWS_SECRET_ACCESS_KEY": "Secret access key for AWS",
    "AWS_BUCKET": "Name of the S3 bucket",
    "AWS_REGION": "AWS region for the bucket",
}


class UploadError(RoverError):
    """Raised when upload fails."""

    pass


@dataclass
class UploadSettings:
    """Credentials and destination for an upload."""

    access_key: str
    secret_key: str
    bucket: str
    region: str
    prefix: str = ""
    session_token: str | None = None

    @classmethod
    def from_env(cls, config: Config | None = None) -> UploadSettings:
        """
        Build settings from AWS_* environment variables.

        Bucket, region and prefix fall back to the config when unset in
        the environment.

        Raises:
            UploadError: If any required value is missing.
        """
        values = {
            "AWS_ACCESS_KEY_ID": os.environ.get("AWS_ACCESS_KEY_ID"),
            "AWS_SECRET_ACCESS_KEY": os.environ.get("AWS_SECRET_ACCESS_KEY"),
            "AWS_BUCKET": os.environ.get("AWS_BUCKET") or (config.aws_bucket if config else None),
            "AWS_REGION": os.environ.get("AWS_REGION") or (config.aws_region if config else None),
        }
        missing = [name for name, value in values.items() if not value]
        if missing:
            details = "\n".join(f"  {name}: {REQUIRED_ENV_VARS[name]}" for name in missing)
            raise UploadError(
                "One or more upload related environment variables not set; "
                f"please ensure that the following environment variables are set:\n\n{details}"
            )

        prefix = os.environ.get("AWS_PREFIX")
        if prefix is None:
            prefix = config.aws_prefix if config else ""

        return cls(
            access_key=values["AWS_ACCESS_KEY_ID"],
            secret_key=values["AWS_SECRET_ACCESS_KEY"],
            bucket=values["AWS_BUCKET"],
            region=values["AWS_REGION"],
            prefix=prefix,
            session_token=os.environ.get("AWS_SESSION_TOKEN") or None,
        )

    def key_for(self, path: Path) -> str:
        prefix = self.prefix.strip("/")
        return f"{prefix}/{path.name}" if prefix else path.name


@dataclass
class UploadResult:
    """Result of an upload operation."""

    success: bool
    bucket: str
    key: str
    size: int = 0
    duration_ms: float = 0.0


class S3Uploader:
    """Uploads archives to S3."""

    def __init__(self, settings: UploadSettings):
        self.settings = settings
        self.client = boto3.client(
            "s3",
            region_name=settings.region,
            aws_access_key_id=settings.access_key,
            aws_secret_access_key=settings.secret_key,
            aws_session_token=settings.session_token,
        )

    def upload(self, path: str | Path) -> UploadResult:
        """
        Upload one archive file.

        Raises:
            UploadError: If the file is missing or S3 rejects the upload.
        """
        path = Path(path)
        if not path.is_file():
            raise UploadError(f"Error opening archive file: {path} does not exist")

        key = self.settings.key_for(path)
        size = path.stat().st_size
        start = time.perf_counter()
        try:
            self.client.upload_file(
                str(path),
                self.settings.bucket,
                key,
                ExtraArgs={"ContentType": "application/zip"},
            )
        except (ClientError, BotoCoreError, S3UploadFailedError) as e:
            raise UploadError(f"Bad response from AWS: {e}") from e

        duration = (time.perf_counter() - start) * 1000
        logger.info(f"Uploaded {path} to s3://{self.settings.bucket}/{key} in {duration:.0f}ms")
        return UploadResult(
            success=True,
            bucket=self.settings.bucket,
            key=key,
            size=size,
            duration_ms=duration,
        )
