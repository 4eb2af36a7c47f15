# utils.py
"""
Shared constants and helpers for reading and writing hosts documents.

This module provides:
- Precompiled regexes for the hosts-line grammar and port suffixes
- Platform default location of the hosts file
- ANSI colour codes for the human listing
- Line splitting and OSError translation used at the I/O boundary
- Atomic replacement of a file on disk

Example Usage:
    from hostsfile.utils import split_lines, default_hosts_path

    split_lines("a\\nb")          # Returns: ["a\\n", "b"]
    default_hosts_path()          # Returns: Path("/etc/hosts") on POSIX
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import sys
import tempfile
from pathlib import Path
from types import SimpleNamespace

from hostsfile.errors import (
    HostsNotFoundError,
    HostsPermissionError,
    UnreadableError,
)

logger = logging.getLogger(__name__)


# -------------------------
# Precompiled regexes & constants
# -------------------------

COMMENT_PREFIX = "#"
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"  # keep undecodable bytes intact on write-back

IO_BUFFER_SIZE = 131072  # 128KB buffer for file I/O

HOSTS_PATH_ENV = "HOSTSFILE_PATH"
POSIX_HOSTS_PATH = Path("/etc/hosts")
WINDOWS_HOSTS_RELPATH = Path("System32") / "drivers" / "etc" / "hosts"

# address token, separators, hostname token, optional trailing whitespace
_HOSTS_ENTRY_RE = re.compile(r"(\S+)[ \t]+(\S+)\s*")
_IPV4_PORT_RE = re.compile(r"([^:]*):[0-9]+")
_IPV6_PORT_RE = re.compile(r"\[(.*)\]:[0-9]+")
_HOSTNAME_RE = re.compile(r"\S+")

HOSTS_ENTRY_RE = _HOSTS_ENTRY_RE
IPV4_PORT_RE = _IPV4_PORT_RE
IPV6_PORT_RE = _IPV6_PORT_RE
HOSTNAME_RE = _HOSTNAME_RE

ANSI = SimpleNamespace(
    RED="\x1b[31m",
    GREEN="\x1b[32m",
    YELLOW="\x1b[33m",
    BLUE="\x1b[34m",
    MAGENTA="\x1b[35m",
    CYAN="\x1b[36m",
    RESET="\x1b[0m",
)


# -------------------------
# Basic helpers
# -------------------------


def is_comment_line(line: str | None) -> bool:
    """True if the first character of the line is '#'."""
    return bool(line) and line[0] == COMMENT_PREFIX


def split_lines(text: str) -> list[str]:
    """
    Split text on '\\n' only, keeping terminators.

    \\r, \\x0b, \\x1c and the other separators str.splitlines() honours stay
    inside the line.
    """
    if not text:
        return []
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def colorize(text: str, color: str, enabled: bool) -> str:
    """Wrap text in an ANSI colour sequence when enabled."""
    if not enabled:
        return text
    return f"{color}{text}{ANSI.RESET}"


def default_hosts_path() -> Path:
    """Return the hosts file location: $HOSTSFILE_PATH, else the platform default."""
    override = os.environ.get(HOSTS_PATH_ENV)
    if override:
        return Path(override)
    if sys.platform.startswith("win"):
        root = os.environ.get("SystemRoot", r"C:\Windows")
        return Path(root) / WINDOWS_HOSTS_RELPATH
    return POSIX_HOSTS_PATH


# -------------------------
# Filesystem helpers
# -------------------------


def translate_os_error(exc: OSError, path: str | os.PathLike) -> OSError:
    """Map a low-level OSError onto the hostsfile error kinds."""
    if isinstance(exc, FileNotFoundError):
        return HostsNotFoundError(f"No such file: {path}")
    if isinstance(exc, PermissionError):
        return HostsPermissionError(f"Permission denied: {path}")
    return UnreadableError(f"Cannot access {path}: {exc.strerror or exc}")


def atomic_write_bytes(target: str | os.PathLike, data: bytes) -> None:
    """
    Atomically write `data` to `target`.

    The temporary file lives next to the target so the final rename stays on
    one filesystem. An existing target's permission bits are carried over to
    the replacement (NamedTemporaryFile creates files as 0600).
    """
    target = Path(target)
    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "wb",
            dir=target.parent,
            prefix=".tmp_hosts_",
            delete=False,
            buffering=IO_BUFFER_SIZE,
        ) as tmp_file:
            tmp_path = Path(tmp_file.name)
            tmp_file.write(data)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        if target.exists():
            shutil.copymode(target, tmp_path)
        tmp_path.replace(target)
        tmp_path = None
    finally:
        if tmp_path and tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


__all__ = [
    # Functions
    "is_comment_line",
    "split_lines",
    "colorize",
    "default_hosts_path",
    "translate_os_error",
    "atomic_write_bytes",
    # Constants
    "COMMENT_PREFIX",
    "ENCODING",
    "ENCODING_ERRORS",
    "IO_BUFFER_SIZE",
    "HOSTS_PATH_ENV",
    "POSIX_HOSTS_PATH",
    "WINDOWS_HOSTS_RELPATH",
    "ANSI",
    # Regex patterns
    "HOSTS_ENTRY_RE",
    "IPV4_PORT_RE",
    "IPV6_PORT_RE",
    "HOSTNAME_RE",
]
