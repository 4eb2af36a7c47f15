"""
classify.py

Syntactic IP address classification for hosts entries.

Accepts a bare numeric address, `IPv4:port` or `[IPv6]:port`, and reports the
address family. Never performs name resolution.

Usage:
    from hostsfile.classify import AddressFamily, classify
    classify("192.168.1.1:8080")   # AddressFamily.IPV4
    classify("[::1]:443")          # AddressFamily.IPV6
"""

from __future__ import annotations

import ipaddress
from enum import Enum
from functools import lru_cache

from hostsfile import utils
from hostsfile.errors import InvalidAddressError

CLASSIFY_CACHE_SIZE = 4096


class AddressFamily(Enum):
    """Address family of a mapping; NONE doubles as the "any family" filter."""

    IPV4 = "IPv4"
    IPV6 = "IPv6"
    NONE = "none"

    def __str__(self) -> str:
        return self.value


def strip_port(text: str) -> str:
    """Return the address part of `text`, dropping an `:port` suffix if present."""
    m = utils.IPV4_PORT_RE.fullmatch(text)
    if m:
        return m.group(1)
    m = utils.IPV6_PORT_RE.fullmatch(text)
    if m:
        return m.group(1)
    return text


def _parse_ipv4(candidate: str) -> bool:
    try:
        ipaddress.IPv4Address(candidate)
    except ValueError:
        return False
    return True


def _parse_ipv6(candidate: str) -> bool:
    # no scoped addresses (fe80::1%eth0)
    if "%" in candidate:
        return False
    try:
        ipaddress.IPv6Address(candidate)
    except ValueError:
        return False
    return True


def classify(text: str) -> AddressFamily:
    """
    Classify `text` as IPv4 or IPv6.

    Raises InvalidAddressError(text) when the candidate (after port
    stripping) is neither, or when `text` is not a string at all.
    """
    if not isinstance(text, str):
        raise InvalidAddressError(repr(text))
    return _classify(text)


@lru_cache(maxsize=CLASSIFY_CACHE_SIZE)
def _classify(text: str) -> AddressFamily:
    candidate = strip_port(text)
    if _parse_ipv4(candidate):
        return AddressFamily.IPV4
    if _parse_ipv6(candidate):
        return AddressFamily.IPV6
    raise InvalidAddressError(text)


def is_valid_address(text: str) -> bool:
    """Return True if `text` classifies as IPv4 or IPv6."""
    try:
        classify(text)
    except InvalidAddressError:
        return False
    return True


__all__ = [
    "AddressFamily",
    "classify",
    "is_valid_address",
    "strip_port",
]
