"""
Platform command catalog.

Declarative lists of the diagnostic captures Rover takes, keyed by operating
system family. Entries are static; an optional precondition is evaluated
right before dispatch and may bind placeholder values such as {pid} or
{log_file} used in the executable or arguments.
"""

from __future__ import annotations

import os
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from rover.host import HostContext, OSFamily
from rover.locator import ServiceProbe

SYSTEMD_DIR = "/run/systemd/system"
SYSLOG_FILES = ("/var/log/syslog", "/var/log/messages")

RELEASE_FILES = (
    ("file_etc_redhat_release", "/etc/redhat-release"),
    ("file_etc_fedora_release", "/etc/fedora-release"),
    ("file_etc_slackware_release", "/etc/slackware-release"),
    ("file_etc_debian_release", "/etc/debian_release"),
    ("file_etc_os_release", "/etc/os-release"),
)


@dataclass(frozen=True)
class DispatchContext:
    """What preconditions may look at when deciding whether to dispatch."""

    host: HostContext
    probe: ServiceProbe | None = None
    bindings: Mapping[str, str] = field(default_factory=dict)


class Precondition(ABC):
    """Gate evaluated just before a catalog entry is dispatched."""

    @abstractmethod
    def evaluate(self, ctx: DispatchContext) -> dict[str, str] | None:
        """Return placeholder bindings when satisfied, None otherwise."""

    @abstractmethod
    def describe(self) -> str:
        pass


@dataclass(frozen=True)
class PathExists(Precondition):
    path: str

    def evaluate(self, ctx: DispatchContext) -> dict[str, str] | None:
        return {} if os.path.exists(self.path) else None

    def describe(self) -> str:
        return f"{self.path} exists"


@dataclass(frozen=True)
class FirstExisting(Precondition):
    """Bind key to the first existing path of a fixed priority list."""

    paths: tuple[str, ...]
    key: str = "log_file"

    def evaluate(self, ctx: DispatchContext) -> dict[str, str] | None:
        for path in self.paths:
            if os.path.exists(path):
                return {self.key: path}
        return None

    def describe(self) -> str:
        return f"one of {', '.join(self.paths)} exists"


@dataclass(frozen=True)
class ProcessResolved(Precondition):
    """Linux host with a resolved service process id; binds {pid}."""

    def evaluate(self, ctx: DispatchContext) -> dict[str, str] | None:
        if ctx.host.os is not OSFamily.LINUX or ctx.probe is None:
            return None
        if not ctx.probe.is_present or ctx.probe.pid is None:
            return None
        return {"pid": str(ctx.probe.pid)}

    def describe(self) -> str:
        return "Linux with a resolved process id"


@dataclass(frozen=True)
class HttpClient(Precondition):
    """curl or wget on PATH; binds {http} and its quiet-to-stdout flag {http_quiet}."""

    def evaluate(self, ctx: DispatchContext) -> dict[str, str] | None:
        if shutil.which("curl"):
            return {"http": "curl", "http_quiet": "-s"}
        if shutil.which("wget"):
            return {"http": "wget", "http_quiet": "-qO-"}
        return None

    def describe(self) -> str:
        return "curl or wget available"


@dataclass(frozen=True)
class AllOf(Precondition):
    conditions: tuple[Precondition, ...]

    def evaluate(self, ctx: DispatchContext) -> dict[str, str] | None:
        bindings: dict[str, str] = {}
        for condition in self.conditions:
            bound = condition.evaluate(ctx)
            if bound is None:
                return None
            bindings.update(bound)
        return bindings

    def describe(self) -> str:
        return " and ".join(c.describe() for c in self.conditions)


def substitute(value: str, bindings: Mapping[str, str]) -> str:
    """Replace {key} placeholders. Unknown braces such as find's {} are kept."""
    for key, bound in bindings.items():
        value = value.replace("{" + key + "}", bound)
    return value


@dataclass(frozen=True)
class CommandSpec:
    """One diagnostic capture."""

    category: str
    name: str
    executable: str
    args: tuple[str, ...] = ()
    precondition: Precondition | None = None

    def resolve(self, ctx: DispatchContext) -> tuple[str, list[str]] | None:
        """
        Evaluate the precondition and fill in placeholders.

        Returns:
            (executable, args) ready to run, or None if the precondition is unmet.
        """
        bindings = dict(ctx.bindings)
        if self.precondition is not None:
            bound = self.precondition.evaluate(ctx)
            if bound is None:
                return None
            bindings.update(bound)
        return (
            substitute(self.executable, bindings),
            [substitute(arg, bindings) for arg in self.args],
        )


def _entries(category: str, rows) -> tuple[CommandSpec, ...]:
    specs = []
    for row in rows:
        name, argv = row[0], row[1]
        precondition = row[2] if len(row) > 2 else None
        specs.append(CommandSpec(category, name, argv[0], tuple(argv[1:]), precondition))
    return tuple(specs)


def _cat(name: str, path: str, precondition: Precondition | None = None):
    return (name, ["cat", path], precondition)


# System

_SYSTEM_UNIX_COMMON = [
    (name, ["cat", path], PathExists(path)) for name, path in RELEASE_FILES
] + [
    ("date", ["date"]),
    ("df", ["df"]),
    ("df_i", ["df", "-i"]),
    ("df_h", ["df", "-h"]),
    ("dmesg", ["dmesg"]),
    ("hostname", ["hostname"]),
    ("last", ["last"]),
    ("mount", ["mount"]),
    ("netstat_anW", ["netstat", "-anW"]),
    ("netstat_indW", ["netstat", "-indW"]),
    ("netstat_mmmW", ["netstat", "-mmmW"]),
    ("netstat_nralW", ["netstat", "-nralW"]),
    ("netstat_rn", ["netstat", "-rn"]),
    ("netstat_sW", ["netstat", "-sW"]),
    ("pfctl_rules", ["pfctl", "-s", "rules"]),
    ("pfctl_nat", ["pfctl", "-s", "nat"]),
    ("sysctl", ["sysctl", "-a"]),
    ("uname", ["uname", "-a"]),
    ("w", ["w"]),
    _cat("file_etc_fstab", "/etc/fstab"),
    _cat("file_etc_hosts", "/etc/hosts"),
    _cat("file_etc_resolv_conf", "/etc/resolv.conf"),
]

_SYSTEM_DARWIN = [
    ("ifconfig", ["ifconfig", "-a"]),
    ("netstat_rs", ["netstat", "-rs"]),
    ("ps", ["ps", "aux"]),
    ("top", ["top", "-l", "1"]),
    ("vm_stat", ["vm_stat"]),
    _cat("file_var_log_system_log", "/var/log/system.log"),
]

_SYSTEM_FREEBSD = [
    ("arp_a", ["arp", "-a"]),
    ("ifconfig", ["ifconfig", "-a"]),
    ("iostat_bsd", ["iostat", "-c", "10"]),
    ("pkg_info", ["pkg", "info"]),
    ("ps", ["ps", "aux"]),
    ("swapinfo", ["swapinfo"]),
    ("top", ["top", "-n", "-b"]),
    ("vmstat", ["vmstat", "1", "10"]),
    _cat("file_var_run_dmesg_boot", "/var/run/dmesg.boot"),
    _cat("file_var_log_messages", "/var/log/messages"),
    _cat("file_etc_rc_conf", "/etc/rc.conf"),
    _cat("file_etc_sysctl_conf", "/etc/sysctl.conf"),
]

_SYSTEM_LINUX = [
    ("bonding", ["find", "/proc/net/bonding/", "-type", "f", "-print", "-exec", "cat", "{}", ";"]),
    ("disk_by_id", ["ls", "-l", "/dev/disk/by-id"]),
    ("dpkg", ["dpkg", "-l"]),
    ("free", ["free", "-m"]),
    ("ifconfig", ["ifconfig", "-a"]),
    ("iostat_linux", ["iostat", "-mx", "1", "10"]),
    ("ip_addr", ["ip", "addr"]),
    ("lsb_release", ["lsb_release"]),
    ("ps", ["ps", "-aux"]),
    ("rpm", ["rpm", "-qa"]),
    (
        "rx_crc_errors",
        ["find", "/sys/class/net/", "-type", "l", "-print", "-exec", "cat", "{}/statistics/rx_crc_errors", ";"],
    ),
    (
        "schedulers",
        ["find", "/sys/block/", "-type", "l", "-print", "-exec", "cat", "{}/queue/scheduler", ";"],
    ),
    ("sestatus", ["sestatus", "-v"]),
    ("swapctl", ["swapctl", "-s"]),
    ("swapon", ["swapon", "-s"]),
    ("top", ["top", "-n", "1", "-b"]),
    ("vmstat", ["vmstat", "1", "10"]),
    ("sys_class_net", ["ls", "/sys/class/net"]),
    _cat("proc_net_fib_trie", "/proc/net/fib_trie"),
    ("journalctl_dmesg", ["journalctl", "--dmesg", "--no-pager"], PathExists(SYSTEMD_DIR)),
    ("journalctl_system", ["journalctl", "--system", "--no-pager"], PathExists(SYSTEMD_DIR)),
    ("systemctl_all", ["systemctl", "--all", "--no-pager"], PathExists(SYSTEMD_DIR)),
    (
        "systemctl_unit_files",
        ["systemctl", "list-unit-files", "--no-pager"],
        PathExists(SYSTEMD_DIR),
    ),
    _cat("file_var_log_daemon", "/var/log/daemon"),
    _cat("file_var_log_debug", "/var/log/debug"),
    _cat("file_etc_security_limits", "/etc/security/limits.conf"),
    _cat("file_var_log_kern", "/var/log/kern.log"),
    _cat("file_var_log_messages", "/var/log/messages"),
    _cat("file_var_log_syslog", "/var/log/syslog"),
    _cat("proc_cgroups", "/proc/cgroups"),
    _cat("proc_cpuinfo", "/proc/cpuinfo"),
    _cat("proc_diskstats", "/proc/diskstats"),
    _cat("proc_interrupts", "/proc/interrupts"),
    _cat("proc_meminfo", "/proc/meminfo"),
    _cat("proc_mounts", "/proc/mounts"),
    _cat("proc_partitions", "/proc/partitions"),
    _cat("proc_stat", "/proc/stat"),
    _cat("proc_swaps", "/proc/swaps"),
    _cat("proc_uptime", "/proc/uptime"),
    _cat("proc_version", "/proc/version"),
    _cat("proc_vmstat", "/proc/vmstat"),
    _cat("proc_sys_vm_swappiness", "/proc/sys/vm/swappiness"),
]

_SYSTEM_OPENBSD_NETBSD = [
    ("ifconfig", ["ifconfig", "-a"]),
    ("pkg_info", ["pkg_info"]),
    ("ps", ["ps", "aux"]),
    ("swapctl", ["swapctl", "-l"]),
    ("vmstat", ["vmstat", "1", "10"]),
    _cat("file_var_run_dmesg_boot", "/var/run/dmesg.boot"),
    _cat("file_var_log_messages", "/var/log/messages"),
    _cat("file_etc_rc_conf", "/etc/rc.conf"),
]

_SYSTEM_SOLARIS = [
    ("ifconfig", ["ifconfig", "-a"]),
    ("prtconf", ["prtconf"]),
    ("psrinfo", ["psrinfo", "-v"]),
    ("ps", ["ps", "-ef"]),
    ("swap", ["swap", "-s"]),
    ("vmstat", ["vmstat", "1", "10"]),
    _cat("file_var_adm_messages", "/var/adm/messages"),
]

_SYSTEM_WINDOWS = [
    ("systeminfo", ["systeminfo"]),
    ("hostname", ["hostname"]),
    ("ipconfig", ["ipconfig", "/all"]),
    ("netstat_an", ["netstat", "-an"]),
    ("netstat_rn", ["netstat", "-rn"]),
    ("tasklist", ["tasklist", "/v"]),
    ("driverquery", ["driverquery", "/v"]),
    ("wmic_logicaldisk", ["wmic", "logicaldisk", "get", "caption,size,freespace"]),
]

SYSTEM_CATALOG: dict[OSFamily, tuple[CommandSpec, ...]] = {
    OSFamily.DARWIN: _entries("system", _SYSTEM_UNIX_COMMON + _SYSTEM_DARWIN),
    OSFamily.FREEBSD: _entries("system", _SYSTEM_UNIX_COMMON + _SYSTEM_FREEBSD),
    OSFamily.LINUX: _entries("system", _SYSTEM_UNIX_COMMON + _SYSTEM_LINUX),
    OSFamily.NETBSD: _entries("system", _SYSTEM_UNIX_COMMON + _SYSTEM_OPENBSD_NETBSD),
    OSFamily.OPENBSD: _entries("system", _SYSTEM_UNIX_COMMON + _SYSTEM_OPENBSD_NETBSD),
    OSFamily.SOLARIS: _entries("system", _SYSTEM_UNIX_COMMON + _SYSTEM_SOLARIS),
    OSFamily.WINDOWS: _entries("system", _SYSTEM_WINDOWS),
}


# Services

def _service_logs(service: str, os_family: OSFamily) -> list:
    """syslog extraction and process table rows shared by the service catalogs."""
    rows: list = []
    if os_family is OSFamily.LINUX:
        rows += [
            _cat(f"proc_{service}_limits", "/proc/{pid}/limits", ProcessResolved()),
            _cat(f"proc_{service}_status", "/proc/{pid}/status", ProcessResolved()),
            (
                f"proc_{service}_open_file_count",
                ["sh", "-c", "ls /proc/{pid}/fd | wc -l"],
                ProcessResolved(),
            ),
        ]
    if os_family is OSFamily.DARWIN:
        rows.append((f"{service}_syslog", ["grep", "-w", service, "/var/log/system.log"]))
    elif os_family in (OSFamily.FREEBSD, OSFamily.LINUX):
        rows.append(
            (f"{service}_syslog", ["grep", "-w", service, "{log_file}"], FirstExisting(SYSLOG_FILES))
        )
    if os_family is OSFamily.LINUX:
        rows.append(
            (
                f"{service}_journald",
                ["journalctl", "-b", "--no-pager", "-u", service],
                PathExists(SYSTEMD_DIR),
            )
        )
    return rows


def _consul(os_family: OSFamily) -> tuple[CommandSpec, ...]:
    token_header = "X-Consul-Token: {consul_token}"
    rows = [
        ("consul_version", ["consul", "version"]),
        ("consul_info", ["consul", "info"]),
        ("consul_members", ["consul", "members"]),
        ("consul_operator_raft_list_peers", ["consul", "operator", "raft", "list-peers"]),
    ]
    rows += _service_logs("consul", os_family)
    if os_family is not OSFamily.WINDOWS:
        rows += [
            (
                "consul_goroutine",
                ["{http}", "{http_quiet}", "--header", token_header,
                 "http://localhost:8500/debug/pprof/goroutine?debug=2"],
                HttpClient(),
            ),
            (
                "consul_heap",
                ["{http}", "{http_quiet}", "--header", token_header,
                 "http://localhost:8500/debug/pprof/heap?debug=1"],
                HttpClient(),
            ),
        ]
    return _entries("consul", rows)


def _nomad(os_family: OSFamily) -> tuple[CommandSpec, ...]:
    rows = [
        ("nomad_status", ["nomad", "status"]),
        ("nomad_version", ["nomad", "version"]),
    ]
    rows += _service_logs("nomad", os_family)
    return _entries("nomad", rows)


class CliSyntax(str, Enum):
    """Vault CLI generations; 0.9.2 and earlier use the legacy command names."""

    LEGACY = "legacy"
    CURRENT = "current"


_VAULT_TOKEN_COMMANDS = {
    CliSyntax.CURRENT: [
        ("vault_audit_list", ["vault", "audit", "list"]),
        ("vault_auth_methods", ["vault", "auth", "list"]),
        ("vault_mounts", ["vault", "secrets", "list"]),
    ],
    CliSyntax.LEGACY: [
        ("vault_audit_list", ["vault", "audit-list"]),
        ("vault_auth_methods", ["vault", "auth", "-methods"]),
        ("vault_mounts", ["vault", "mounts"]),
    ],
}


def _vault(os_family: OSFamily, syntax: CliSyntax) -> tuple[CommandSpec, ...]:
    rows = [
        ("vault_version", ["vault", "version"]),
        ("vault_status", ["vault", "status"]),
    ]
    rows += _VAULT_TOKEN_COMMANDS[syntax]
    rows += _service_logs("vault", os_family)
    return _entries("vault", rows)


def system_commands(os_family: OSFamily | None) -> tuple[CommandSpec, ...]:
    """System catalog for an OS family. Unsupported platforms get nothing."""
    if os_family is None:
        return ()
    return SYSTEM_CATALOG.get(os_family, ())


def consul_commands(os_family: OSFamily | None) -> tuple[CommandSpec, ...]:
    return _consul(os_family) if os_family is not None else ()


def nomad_commands(os_family: OSFamily | None) -> tuple[CommandSpec, ...]:
    return _nomad(os_family) if os_family is not None else ()


def vault_commands(
    os_family: OSFamily | None, syntax: CliSyntax = CliSyntax.CURRENT
) -> tuple[CommandSpec, ...]:
    return _vault(os_family, syntax) if os_family is not None else ()
