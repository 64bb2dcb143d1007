"""
Semantic version parsing and comparison.

Accepts the loose forms HashiCorp tools print, such as "v1.15.2", "0.9",
"1.2.3.4", "1.0.0beta1" or "1.4.0-beta1+ent". Any number of numeric
segments is allowed; missing segments compare as zero.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

from rover.errors import VersionError

# A pre-release without a hyphen must start with a letter
VERSION_RE = re.compile(
    r"^v?(?P<segments>\d+(?:\.\d+)*)"
    r"(?:-(?P<pre>[0-9A-Za-z.~-]+)|(?P<bare_pre>[A-Za-z~][0-9A-Za-z.~-]*))?"
    r"(?:\+(?P<build>[0-9A-Za-z.~-]+))?$"
)


def _pre_key(pre: str) -> tuple[tuple[int, int | str], ...]:
    # Numeric identifiers sort before alphanumeric ones
    key = []
    for part in pre.split("."):
        if part.isdigit():
            key.append((0, int(part)))
        else:
            key.append((1, part))
    return tuple(key)


@total_ordering
@dataclass(frozen=True)
class Version:
    """
    A parsed semantic version. Build metadata is ignored for ordering.

    extra holds numeric segments beyond the third, as in "1.2.3.4".
    """

    major: int
    minor: int = 0
    patch: int = 0
    prerelease: str = ""
    extra: tuple[int, ...] = ()

    @classmethod
    def parse(cls, value: str) -> Version:
        match = VERSION_RE.match(value.strip()) if value else None
        if not match:
            raise VersionError(f"Malformed version: {value!r}")
        numbers = [int(part) for part in match.group("segments").split(".")]
        numbers += [0] * (3 - len(numbers))
        return cls(
            major=numbers[0],
            minor=numbers[1],
            patch=numbers[2],
            prerelease=match.group("pre") or match.group("bare_pre") or "",
            extra=tuple(numbers[3:]),
        )

    def _key(self) -> tuple:
        segments = list(self.extra)
        while segments and segments[-1] == 0:
            segments.pop()
        base = (self.major, self.minor, self.patch, tuple(segments))
        # A release ranks above any of its pre-releases
        if self.prerelease:
            return base + (0, _pre_key(self.prerelease))
        return base + (1, ())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        text = ".".join(str(n) for n in (self.major, self.minor, self.patch, *self.extra))
        return f"{text}-{self.prerelease}" if self.prerelease else text


def is_newer(detected: str, breakpoint: str) -> bool:
    """Return True when detected is strictly greater than breakpoint."""
    return Version.parse(detected) > Version.parse(breakpoint)
