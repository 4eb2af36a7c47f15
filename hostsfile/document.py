#!/usr/bin/env python3
"""
document.py

Order- and comment-preserving model of a hosts file.

A hosts document is a list of lines, each either a Mapping (`<ip> <hostname>`)
or a Comment (anything else, stored byte-for-byte with its terminator).

Operations:
  parse / parse_text  : build a document from a path, stream or string.
  serialize / to_text : write back, new mappings as `ip<TAB>host\\n` and
                        everything else as read.
  render_human        : read-only listing for display.
  add                 : upsert on (hostname, family).
  remove              : drop every mapping for a hostname (optionally one family).
  merge               : add every mapping of another document.
  delete              : remove every (hostname, family) of another document.

Usage:
    from hostsfile import document
    doc = document.parse("/etc/hosts")
    document.add(doc, "127.0.0.1", "example.test")
    document.serialize(doc, "/etc/hosts")
"""

from __future__ import annotations

import io
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import IO, Iterable, Iterator, Union

from hostsfile import utils
from hostsfile.classify import AddressFamily, classify
from hostsfile.errors import (
    InvalidAddressError,
    InvalidHostnameError,
    MissingArgumentError,
)

logger = logging.getLogger(__name__)

IO_BUFFER_SIZE = utils.IO_BUFFER_SIZE
ANSI = utils.ANSI


# ----------------------------------------
# Line types
# ----------------------------------------
@dataclass
class Mapping:
    """
    An `<address> <hostname>` line.

    `family` may be left as AddressFamily.NONE and is then resolved from the
    address. `raw_text` holds the original line for mappings read from a
    source; it is dropped as soon as the address is overwritten, after which
    the mapping serializes in canonical form.
    """

    address: str
    family: AddressFamily = AddressFamily.NONE
    hostname: str = ""
    raw_text: str | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        _require_hostname(self.hostname)
        resolved = classify(self.address)
        if self.family is AddressFamily.NONE:
            self.family = resolved
        elif self.family is not resolved:
            raise ValueError(
                f"{self.address} is {resolved}, not {self.family}"
            )

    def canonical(self) -> str:
        return f"{self.address}\t{self.hostname}\n"


@dataclass(frozen=True)
class Comment:
    """Any line that is not a mapping, including blank lines."""

    raw_text: str


Line = Union[Mapping, Comment]


@dataclass
class HostsDocument:
    """Ordered sequence of hosts lines."""

    lines: list[Line] = field(default_factory=list)
    origin: str | None = None

    def __iter__(self) -> Iterator[Line]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def mappings(self) -> list[Mapping]:
        return [line for line in self.lines if isinstance(line, Mapping)]

    def comments(self) -> list[Comment]:
        return [line for line in self.lines if isinstance(line, Comment)]

    def find(
        self, hostname: str, family: AddressFamily | None = None
    ) -> list[Mapping]:
        """Return mappings for `hostname`, optionally restricted to one family."""
        return [
            m
            for m in self.mappings()
            if m.hostname == hostname and _family_matches(m.family, family)
        ]


# ----------------------------------------
# Helpers
# ----------------------------------------
def _family_matches(actual: AddressFamily, wanted: AddressFamily | None) -> bool:
    if wanted is None or wanted is AddressFamily.NONE:
        return True
    return actual is wanted


def _require(value: str | None, name: str) -> str:
    if value is None or value == "":
        raise MissingArgumentError(name)
    return value


def _require_hostname(value: str | None) -> str:
    # a single token with no whitespace
    hostname = _require(value, "hostname")
    if not utils.HOSTNAME_RE.fullmatch(hostname):
        raise InvalidHostnameError(hostname)
    return hostname


def _is_binary_stream(stream: IO) -> bool:
    if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
        return True
    return "b" in getattr(stream, "mode", "")


def _decode(raw: bytes) -> str:
    return raw.decode(utils.ENCODING, errors=utils.ENCODING_ERRORS)


def _encode(text: str) -> bytes:
    return text.encode(utils.ENCODING, errors=utils.ENCODING_ERRORS)


def _source_name(source: object) -> str:
    if isinstance(source, (str, os.PathLike)):
        return os.fspath(source)
    return getattr(source, "name", None) or "<stream>"


# ----------------------------------------
# Parsing
# ----------------------------------------
def parse_line(line: str) -> Line:
    """
    Classify one raw line (terminator included).

    Raises InvalidAddressError when the line has mapping shape but its
    address token is not an IP address.
    """
    if utils.is_comment_line(line):
        return Comment(line)
    m = utils.HOSTS_ENTRY_RE.fullmatch(line)
    if not m:
        return Comment(line)
    address, hostname = m.group(1), m.group(2)
    family = classify(address)
    return Mapping(address, family, hostname, raw_text=line)


def _build_document(lines: Iterable[str], origin: str) -> HostsDocument:
    doc = HostsDocument(origin=origin)
    for lineno, raw in enumerate(lines, start=1):
        try:
            doc.lines.append(parse_line(raw))
        except InvalidAddressError as exc:
            raise InvalidAddressError(exc.address, line_number=lineno) from exc
    logger.debug(
        "Parsed %s: %d lines, %d mappings", origin, len(doc), len(doc.mappings())
    )
    return doc


def parse(source: str | os.PathLike | IO) -> HostsDocument:
    """
    Parse a hosts document from a path or an open (text or binary) stream.

    Raises HostsNotFoundError, HostsPermissionError or UnreadableError for
    I/O failures and InvalidAddressError for a mapping line whose address
    does not classify. Nothing is returned on failure.
    """
    origin = _source_name(source)
    if isinstance(source, (str, os.PathLike)):
        try:
            # binary iteration splits on b"\n" only
            with open(source, "rb", buffering=IO_BUFFER_SIZE) as fh:
                return _build_document((_decode(raw) for raw in fh), origin)
        except OSError as exc:
            raise utils.translate_os_error(exc, source) from exc

    try:
        data = source.read()
    except OSError as exc:
        raise utils.translate_os_error(exc, origin) from exc
    if isinstance(data, bytes):
        data = _decode(data)
    return _build_document(utils.split_lines(data), origin)


def parse_text(text: str, origin: str = "<string>") -> HostsDocument:
    """Parse a hosts document held in memory."""
    return _build_document(utils.split_lines(text), origin)


# ----------------------------------------
# Serialization
# ----------------------------------------
def _format_line(line: Line) -> str:
    if isinstance(line, Mapping):
        return line.raw_text if line.raw_text is not None else line.canonical()
    if isinstance(line, Comment):
        return line.raw_text
    raise TypeError(f"Unknown hosts line type: {type(line).__name__}")


def to_text(document: HostsDocument) -> str:
    """Return the serialized text of `document` (see serialize)."""
    parts: list[str] = []
    for line in document.lines:
        # a source without a trailing newline must not glue on appended lines
        if parts and not parts[-1].endswith("\n"):
            parts.append("\n")
        parts.append(_format_line(line))
    return "".join(parts)


def serialize(document: HostsDocument, sink: str | os.PathLike | IO) -> None:
    """
    Write `document` to a path or an open stream.

    Mappings that were parsed and never modified are written back
    byte-for-byte as they were read, spacing and terminator included. New or
    overwritten mappings use the canonical `address<TAB>hostname\\n` form, and
    comments are always verbatim.

    Paths are replaced atomically; a failed write leaves the old file intact.
    """
    text = to_text(document)
    if isinstance(sink, (str, os.PathLike)):
        try:
            utils.atomic_write_bytes(sink, _encode(text))
        except OSError as exc:
            raise utils.translate_os_error(exc, sink) from exc
        logger.debug("Wrote %d lines to %s", len(document), os.fspath(sink))
        return
    if _is_binary_stream(sink):
        sink.write(_encode(text))
    else:
        sink.write(text)


def render_human(
    document: HostsDocument,
    sink: IO | None = None,
    verbose: bool = False,
    color: bool = False,
) -> int:
    """
    Write a labelled listing of the mappings in `document`.

    Plain form is `hostname -> address`; verbose form prefixes the 1-based
    line position and the address family. Returns the number of mappings
    listed. The output is for people and is never parsed back.
    """
    out = sink if sink is not None else sys.stdout
    count = 0
    width = len(str(len(document.lines)))
    for position, line in enumerate(document.lines, start=1):
        if not isinstance(line, Mapping):
            continue
        host = utils.colorize(line.hostname, ANSI.GREEN, color)
        addr = utils.colorize(line.address, ANSI.CYAN, color)
        if verbose:
            lineno = utils.colorize(f"{position:>{width}}", ANSI.MAGENTA, color)
            family = utils.colorize(f"{line.family.value:<4}", ANSI.YELLOW, color)
            out.write(f"{lineno}  {family}  {host} -> {addr}\n")
        else:
            out.write(f"{host} -> {addr}\n")
        count += 1
    return count


# ----------------------------------------
# Mutations
# ----------------------------------------
def add(document: HostsDocument, address: str | None, hostname: str | None) -> Mapping:
    """
    Add or overwrite the mapping for (hostname, family(address)).

    An existing mapping with the same hostname and family keeps its position
    and takes the new address; otherwise a new mapping is appended.
    """
    address = _require(address, "address")
    hostname = _require_hostname(hostname)
    family = classify(address)

    for line in document.lines:
        if (
            isinstance(line, Mapping)
            and line.family is family
            and line.hostname == hostname
        ):
            if line.address != address:
                logger.debug(
                    "Overwriting %s (%s): %s -> %s",
                    hostname,
                    family,
                    line.address,
                    address,
                )
                line.address = address
                line.raw_text = None
            return line

    mapping = Mapping(address, family, hostname)
    document.lines.append(mapping)
    logger.debug("Appended %s (%s) -> %s", hostname, family, address)
    return mapping


def remove(
    document: HostsDocument,
    hostname: str | None,
    family: AddressFamily | None = None,
) -> int:
    """
    Delete every mapping for `hostname`; `family` None/NONE means any family.

    Returns the number of mappings removed.
    """
    hostname = _require(hostname, "hostname")
    kept = [
        line
        for line in document.lines
        if not (
            isinstance(line, Mapping)
            and line.hostname == hostname
            and _family_matches(line.family, family)
        )
    ]
    removed = len(document.lines) - len(kept)
    document.lines[:] = kept
    logger.debug("Removed %d mapping(s) for %s", removed, hostname)
    return removed


def merge(target: HostsDocument, source: HostsDocument) -> int:
    """
    Upsert every mapping of `source` into `target`, in source order.

    Source comments are not imported. Returns the number of mappings applied.
    """
    incoming = source.mappings()
    for m in incoming:
        _require_hostname(m.hostname)
        classify(m.address)
    for m in incoming:
        add(target, m.address, m.hostname)
    logger.debug("Merged %d mapping(s) into %s", len(incoming), target.origin)
    return len(incoming)


def delete(target: HostsDocument, source: HostsDocument) -> int:
    """
    Remove from `target` every mapping whose hostname and family appear in `source`.

    Returns the number of mappings removed.
    """
    incoming = source.mappings()
    for m in incoming:
        _require(m.hostname, "hostname")
    removed = 0
    for m in incoming:
        removed += remove(target, m.hostname, m.family)
    logger.debug("Deleted %d mapping(s) from %s", removed, target.origin)
    return removed


__all__ = [
    "Mapping",
    "Comment",
    "Line",
    "HostsDocument",
    "parse_line",
    "parse",
    "parse_text",
    "to_text",
    "serialize",
    "render_human",
    "add",
    "remove",
    "merge",
    "delete",
]
