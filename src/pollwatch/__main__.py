"""Command-line entry point for the path watcher."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .command import CommandRunner
from .config import ConfigError, EmptyWatchSetError, WatchConfig, build_config, load_config
from .monitor import PathMonitor
from .state import SnapshotError

EXIT_FATAL = 1
EXIT_CONFIG = 2
EXIT_NO_FILES = 4

EPILOG = """\
format:
  the command arguments support the following placeholders:
    %f    expands to a space-separated list of file names
    %F    expands to a `, `-separated list of file names
  the file names in the list correspond to those of files or directories
  which have changed since the last update. --command consumes the rest of
  the command line, so pass it last.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pollwatch",
        description="Watch files and directories for changes and run a command",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-f",
        "--files",
        nargs="+",
        metavar="PATH",
        help="Files or directories to watch",
    )
    parser.add_argument(
        "-c",
        "--command",
        nargs=argparse.REMAINDER,
        metavar="ARG",
        help="Command to run when a watched path changes",
    )
    parser.add_argument(
        "-s",
        "--silent",
        action="store_true",
        help="Only log failures (verbose is on by default)",
    )
    parser.add_argument(
        "--config",
        help="Optional YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> WatchConfig:
    base = load_config(Path(args.config)) if args.config else None
    return build_config(args.files, args.command, silent=args.silent, base=base)


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    try:
        watch_config = resolve_config(args)
    except EmptyWatchSetError as exc:
        logging.error("%s", exc)
        raise SystemExit(EXIT_NO_FILES) from exc
    except ConfigError as exc:
        logging.error("%s", exc)
        raise SystemExit(EXIT_CONFIG) from exc

    runner = CommandRunner(watch_config.command, silent=watch_config.silent)
    try:
        monitor = PathMonitor(
            watch_config.files,
            runner,
            poll_interval=watch_config.poll_interval,
        )
        monitor.run()
    except SnapshotError as exc:
        logging.error("%s", exc)
        raise SystemExit(EXIT_FATAL) from exc


if __name__ == "__main__":
    main()
