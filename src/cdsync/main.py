#!/usr/bin/env python
"""Command line entry point for CDSync."""
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from cdsync import __version__
from cdsync.commands import COMMAND_ID, COMMAND_NAME
from cdsync.config import config
from cdsync.exceptions import CDSyncError, SyncInProgressError
from cdsync.models.schema import SyncOutcome
from cdsync.observability import configure_logging
from cdsync.services.sync_service import DictionarySyncService
from cdsync.storage.external_file import PromptFilePicker, StaticFilePicker

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BUSY = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cdsync",
        description="Keep a vault's custom dictionary note and a local word list in sync",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--vault",
        help="Root directory of the note vault",
        type=str,
        default=os.environ.get("CDSYNC_VAULT_PATH"),
    )
    parser.add_argument(
        "--download-dir",
        help="Directory that receives the merged word list",
        type=str,
        default=os.environ.get("CDSYNC_DOWNLOAD_DIR"),
    )
    parser.add_argument(
        "--log-dir",
        help="Directory for rotating log files",
        type=str,
        default=os.environ.get("CDSYNC_LOG_DIR"),
    )
    parser.add_argument(
        "--log-level",
        help="Logging level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=os.environ.get("CDSYNC_LOG_LEVEL", "WARNING"),
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    sync = sub.add_parser(COMMAND_ID, help=COMMAND_NAME)
    sync.add_argument(
        "--file",
        help="Word list to merge (asked for interactively when omitted)",
        type=str,
    )
    sync.add_argument(
        "--apply-lower-case",
        action="store_true",
        help="Fold first-letter-capped words when the To Lower Case setting is on",
    )
    sync.set_defaults(func=cmd_sync)

    settings = sub.add_parser("settings", help="Show or change plugin settings")
    settings.add_argument(
        "--to-lower-case",
        choices=["on", "off"],
        help="Convert first-letter-capped words to lower case",
    )
    settings.set_defaults(func=cmd_settings)

    serve = sub.add_parser("serve", help="Run the MCP server over stdio")
    serve.set_defaults(func=cmd_serve)

    return parser


def update_config(args: argparse.Namespace) -> None:
    """Update the global config with command line arguments."""
    if args.vault:
        config.vault_path = Path(args.vault).expanduser()
    if args.download_dir:
        config.download_dir = Path(args.download_dir).expanduser()
    if args.log_dir:
        config.log_dir = Path(args.log_dir).expanduser()
    if getattr(args, "apply_lower_case", False):
        config.apply_lower_case = True


def _print_notice(message: str) -> None:
    print(message, file=sys.stderr)


def cmd_sync(args: argparse.Namespace) -> int:
    service = DictionarySyncService.from_config(config, notifier=_print_notice)
    picker = StaticFilePicker(args.file) if args.file else PromptFilePicker()
    try:
        result = service.sync(picker)
    except SyncInProgressError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_BUSY
    except CDSyncError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_FAILED

    if result.outcome == SyncOutcome.NOTE_MISSING:
        return EXIT_FAILED
    if result.outcome == SyncOutcome.CANCELLED:
        return EXIT_OK

    print(f"Synced {result.merged_entries} entries")
    print(f"  Added to note: {result.added_to_note}")
    print(f"  Added to word list: {result.added_to_external}")
    print(f"Wrote note: {result.note_path}")
    print(f"Wrote word list: {result.download_path}")
    return EXIT_OK


def cmd_settings(args: argparse.Namespace) -> int:
    service = DictionarySyncService.from_config(config)
    if args.to_lower_case is not None:
        try:
            service.update_settings(to_lower_case=args.to_lower_case == "on")
        except CDSyncError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return EXIT_FAILED
    state = "on" if service.settings.to_lower_case else "off"
    print(f"To Lower Case: {state}")
    return EXIT_OK


def cmd_serve(args: argparse.Namespace) -> int:
    # Imported lazily so the CLI works without starting an MCP runtime
    from cdsync.server.mcp_server import CDSyncMcpServer

    try:
        logger.info("Starting CDSync MCP server")
        server = CDSyncMcpServer()
        server.run()
    except Exception as e:
        logger.error(f"Error running server: {e}")
        return EXIT_FAILED
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CDSync command line."""
    parser = build_parser()
    args = parser.parse_args(argv)
    update_config(args)

    # Console + persistent file logging with rotation
    log_level = getattr(logging, args.log_level.upper(), logging.WARNING)
    try:
        configure_logging(log_dir=config.log_dir, level=log_level, console=True)
    except OSError as e:
        # Fall back to basic console logging if file logging fails
        logging.basicConfig(level=log_level)
        logger.warning(f"Failed to configure file logging: {e}")

    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
