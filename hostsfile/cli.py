#!/usr/bin/env python3
"""
cli.py

Command line interface for editing hosts files.

Actions (exactly one):
  -l/--list                 List mappings (add -v for line numbers and family).
  -e/--echo                 Print the file as it would be written.
  -a/--add HOSTNAME ADDRESS Add or overwrite a mapping.
  -r/--remove HOSTNAME      Remove mappings (-4/-6 restricts the family).
  -m/--merge SOURCE         Upsert every mapping of SOURCE (a local hosts file).
  -d/--delete SOURCE        Remove every hostname/family found in SOURCE.

Usage:
    python -m hostsfile.cli -a example.test 127.0.0.1
    python -m hostsfile.cli -f ./hosts -m ./blocklist.hosts --dry-run

Writing to /etc/hosts requires root privileges.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from hostsfile import document, utils
from hostsfile.classify import AddressFamily
from hostsfile.errors import (
    HostsError,
    HostsNotFoundError,
    HostsPermissionError,
    UnreadableError,
)

# Exit codes
EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2
EXIT_INVALID = 3
EXIT_PERMISSION = 4
EXIT_UNREADABLE = 5

logger = logging.getLogger(__name__)


# ----------------------------------------
# Helpers
# ----------------------------------------
def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Configure root logging once for the command line run."""
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s:%(name)s:%(message)s",
        stream=sys.stderr,
        force=True,
    )


def _use_color(mode: str, stream) -> bool:
    if mode == "always":
        return True
    if mode == "never" or os.environ.get("NO_COLOR"):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


def exit_code_for(exc: HostsError) -> int:
    """Map a hostsfile error onto a process exit code."""
    if isinstance(exc, HostsNotFoundError):
        return EXIT_NOT_FOUND
    if isinstance(exc, HostsPermissionError):
        return EXIT_PERMISSION
    if isinstance(exc, UnreadableError):
        return EXIT_UNREADABLE
    # InvalidAddressError, InvalidHostnameError, MissingArgumentError
    return EXIT_INVALID


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hostsfile",
        description="Command line interface for editing hosts files easily.",
        epilog="Writing to the system hosts file requires root privileges.",
    )
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument(
        "-l", "--list", action="store_true", help="List all entries"
    )
    action.add_argument(
        "-e", "--echo", action="store_true", help="Echo the hosts file as it would be written"
    )
    action.add_argument(
        "-a",
        "--add",
        nargs=2,
        metavar=("HOSTNAME", "ADDRESS"),
        help="Add an entry, overwriting one with the same hostname and family",
    )
    action.add_argument(
        "-r", "--remove", metavar="HOSTNAME", help="Remove all entries for a hostname"
    )
    action.add_argument(
        "-m", "--merge", metavar="SOURCE", help="Merge entries from another hosts file"
    )
    action.add_argument(
        "-d", "--delete", metavar="SOURCE", help="Delete entries listed in another hosts file"
    )

    family = parser.add_mutually_exclusive_group()
    family.add_argument(
        "-4",
        dest="family",
        action="store_const",
        const=AddressFamily.IPV4,
        help="With --remove, only remove IPv4 entries",
    )
    family.add_argument(
        "-6",
        dest="family",
        action="store_const",
        const=AddressFamily.IPV6,
        help="With --remove, only remove IPv6 entries",
    )

    parser.add_argument(
        "-f",
        "--file",
        type=Path,
        default=None,
        help=f"Hosts file to read (default: ${utils.HOSTS_PATH_ENV} or the system hosts file)",
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=None, help="Write result here (default: --file)"
    )
    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Print the result instead of writing it",
    )
    parser.add_argument(
        "--color",
        choices=("auto", "always", "never"),
        default="auto",
        help="Colorize --list output",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose listing and debug logging"
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings")
    return parser


def apply_action(doc: document.HostsDocument, args: argparse.Namespace) -> str:
    """Apply the requested mutation to `doc` and return a one-line summary."""
    if args.add:
        hostname, address = args.add
        document.add(doc, address, hostname)
        return f"added {hostname} -> {address}"
    if args.remove is not None:
        removed = document.remove(doc, args.remove, args.family)
        return f"removed {removed} entr{'y' if removed == 1 else 'ies'} for {args.remove}"
    if args.merge is not None:
        merged = document.merge(doc, document.parse(args.merge))
        return f"merged {merged} entr{'y' if merged == 1 else 'ies'} from {args.merge}"
    if args.delete is not None:
        removed = document.delete(doc, document.parse(args.delete))
        return f"deleted {removed} entr{'y' if removed == 1 else 'ies'} listed in {args.delete}"
    raise ValueError("no mutation requested")


def run(args: argparse.Namespace) -> int:
    hosts_path = args.file or utils.default_hosts_path()
    doc = document.parse(hosts_path)

    if args.list:
        color = _use_color(args.color, sys.stdout)
        document.render_human(doc, sys.stdout, verbose=args.verbose, color=color)
        return EXIT_OK
    if args.echo:
        document.serialize(doc, sys.stdout)
        return EXIT_OK

    summary = apply_action(doc, args)
    if args.dry_run:
        document.serialize(doc, sys.stdout)
        logger.info("dry run: %s", summary)
        return EXIT_OK

    destination = args.output or hosts_path
    document.serialize(doc, destination)
    logger.info("%s (%s)", summary, destination)
    return EXIT_OK


# ----------------------------------------
# CLI entrypoint
# ----------------------------------------
def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.family is not None and args.remove is None:
        parser.error("-4/-6 can only be combined with --remove")
    _configure_logging(args.verbose, args.quiet)

    try:
        return run(args)
    except HostsError as exc:
        logger.error("%s", exc)
        return exit_code_for(exc)


if __name__ == "__main__":
    sys.exit(main())
