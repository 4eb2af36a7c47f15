"""
errors.py

Exception types raised by the hosts-document model.

Every error derives from HostsError so callers can catch the whole family;
the I/O-flavoured ones also subclass the matching builtin so code that
already handles FileNotFoundError / PermissionError keeps working.
"""

from __future__ import annotations


class HostsError(Exception):
    """Base class for all hostsfile errors."""


class HostsNotFoundError(HostsError, FileNotFoundError):
    """Raised when a source or destination path does not exist."""


class HostsPermissionError(HostsError, PermissionError):
    """Raised when a source or destination cannot be opened for lack of rights."""


class UnreadableError(HostsError, OSError):
    """Raised when a source exists but cannot be read."""


class InvalidAddressError(HostsError, ValueError):
    """Raised when text is not a numeric IPv4/IPv6 address (optionally with port)."""

    def __init__(self, address: str, line_number: int | None = None) -> None:
        where = f" (line {line_number})" if line_number is not None else ""
        super().__init__(f"{address} is not a valid IP address{where}")
        self.address = address
        self.line_number = line_number


class MissingArgumentError(HostsError, ValueError):
    """Raised when a mutation is called without a required hostname/address."""

    def __init__(self, name: str) -> None:
        super().__init__(f"missing required argument: {name}")
        self.name = name


class MalformedDocumentError(HostsError, ValueError):
    """Reserved for stricter grammars; non-matching lines currently become comments."""


class InvalidHostnameError(HostsError, ValueError):
    """Raised when a hostname is not a single whitespace-free token."""

    def __init__(self, hostname: str) -> None:
        super().__init__(f"{hostname!r} is not a valid hostname")
        self.hostname = hostname
