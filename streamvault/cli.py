# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Command line interface.

    streamvault backup TARGET [--check] [--no-consumers] [-f] [-w]
    streamvault restore DIRECTORY [--cluster NAME] [--tag TAG ...]

Exit status is 0 on success (or when the operator declines), 1 when the
run fails and 2 on usage errors.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, TextIO

import structlog

from streamvault import __version__
from streamvault.backup import backup_account, restore_account
from streamvault.config import BackupOptions, Placement
from streamvault.env import create_connection_config_from_env
from streamvault.exceptions import StreamVaultError
from streamvault.jetstream import open_stream_manager
from streamvault.log import LOG_LEVELS, configure_logging

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_FAILED = 1


def _existing_dir(value: str) -> Path:
    path = Path(value)
    if not path.is_dir():
        raise argparse.ArgumentTypeError(f"path '{value}' is not a directory")
    return path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="streamvault",
        description="Back up and restore all JetStream streams of a NATS account",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-s", "--server", help="NATS server URLs, comma separated (env NATS_URL)")
    parser.add_argument("--creds", type=Path, help="NATS credentials file (env NATS_CREDS)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds (env NATS_TIMEOUT)")
    parser.add_argument("--js-domain", help="JetStream domain (env NATS_JS_DOMAIN)")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Log level for diagnostics on stderr",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    backup = commands.add_parser(
        "backup",
        aliases=["snapshot"],
        help="Creates a backup of all JetStream Streams over the NATS network",
    )
    backup.add_argument("target", type=Path, help="Directory to create the backup in")
    backup.add_argument(
        "--check",
        action="store_true",
        help="Checks the Stream for health prior to backup",
    )
    backup.add_argument(
        "--consumers",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Enable or disable consumer backups",
    )
    backup.add_argument("-f", "--force", action="store_true", help="Perform backup without prompting")
    backup.add_argument(
        "-w",
        "--critical-warnings",
        action="store_true",
        help="Treat warnings as failures",
    )
    backup.set_defaults(handler=_backup)

    restore = commands.add_parser("restore", help="Restore an account backup over the NATS network")
    restore.add_argument(
        "directory",
        type=_existing_dir,
        help="The directory holding the account backup to restore",
    )
    restore.add_argument("--cluster", help="Place the stream in a specific cluster")
    restore.add_argument(
        "--tag",
        dest="tags",
        action="append",
        default=[],
        help="Place the stream on servers that have specific tags (pass multiple times)",
    )
    restore.set_defaults(handler=_restore)

    return parser


async def _backup(manager, args: argparse.Namespace, out: TextIO) -> int:
    options = BackupOptions(
        include_consumers=args.consumers,
        health_check=args.check,
        force=args.force,
        fail_on_warning=args.critical_warnings,
    )

    report = await backup_account(manager, args.target, options, out=out)
    report.raise_for_failure()
    return EXIT_OK


async def _restore(manager, args: argparse.Namespace, out: TextIO) -> int:
    placement = Placement(cluster=args.cluster, tags=tuple(args.tags))

    await restore_account(manager, args.directory, placement, out=out)
    return EXIT_OK


async def run(args: argparse.Namespace, out: TextIO) -> int:
    """Open one connection for the command and dispatch to its handler."""
    config = create_connection_config_from_env(
        servers=tuple(s.strip() for s in args.server.split(",") if s.strip()) if args.server else None,
        creds_file=args.creds,
        timeout=args.timeout,
        js_domain=args.js_domain,
    )

    async with open_stream_manager(config) as manager:
        return await args.handler(manager, args, out)


def _print_error(e: StreamVaultError, err: TextIO) -> None:
    print(f"streamvault: error: {e.message}", file=err)
    for line in e.details.get("errors", []):
        print(f"  {line}", file=err)
    if "error" in e.details:
        print(f"  {e.details['error']}", file=err)


def main(argv: List[str] | None = None, out: TextIO | None = None, err: TextIO | None = None) -> int:
    out = out or sys.stdout
    err = err or sys.stderr

    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        return asyncio.run(run(args, out))
    except StreamVaultError as e:
        logger.debug("command_failed", command=args.command, error=str(e))
        _print_error(e, err)
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
