"""Command-line entry point for llynx.

Last updated: 2026-10-18
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from llynx import __version__
from llynx.apps.addon.runner import Runner
from llynx.cli.commands import addon, help as help_cmd
from llynx.core import config as config_core
from llynx.core.errors import ConfigError, InvocationFailed, LlynxError, NotFound

logger = logging.getLogger("llynx")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="llynx",
        description="Add LuaLS addons using LuaRocks.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="file-path",
        help=f"Configuration file for frequently used flags (default: {config_core.DEFAULT_CONFIG_PATH}).",
    )
    parser.add_argument(
        "-l",
        "--luarocks",
        metavar="file-path",
        help="Path to the LuaRocks executable (default: looked up on PATH).",
    )
    parser.add_argument(
        "-t",
        "--tree",
        metavar="dir-path",
        help=f"Rocks tree directory (default: ./{config_core.DEFAULTS['tree']}).",
    )
    parser.add_argument(
        "--settings",
        metavar="file-path",
        help=f"Settings file to modify (default: ./{config_core.DEFAULTS['settings']}).",
    )
    parser.add_argument(
        "--server",
        metavar="url",
        help=f"LuaRocks server to look for addons in first (default: {config_core.DEFAULTS['server']}).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity; can be repeated.",
    )
    parser.set_defaults(root_parser=parser)
    subparsers = parser.add_subparsers(dest="command", title="commands")
    addon.register(subparsers)
    help_cmd.register(subparsers)
    return parser


def main(argv: Optional[List[str]] = None, *, runner: Optional[Runner] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return _dispatch(parser, args, runner)
    except KeyboardInterrupt:
        logger.error("Interrupted.")
        return 130


def _dispatch(parser: argparse.ArgumentParser, args: argparse.Namespace, runner: Optional[Runner]) -> int:
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0
    if not getattr(args, "needs_config", True):
        return func(args)

    try:
        effective = config_core.from_args(args)
    except ConfigError as exc:
        config_core.configure_logging(args.verbose)
        logger.error("error: %s", exc)
        return exc.exit_code
    config_core.configure_logging(effective.verbose)
    logger.debug("Effective config: %s", effective)
    args.effective_config = effective
    args.runner = runner

    try:
        return func(args)
    except NotFound as exc:
        logger.warning("%s", exc)
        return exc.exit_code
    except InvocationFailed as exc:
        logger.error("error: %s", exc)
        if exc.stderr.strip():
            logger.error("%s", exc.stderr.rstrip())
        return exc.exit_code
    except LlynxError as exc:
        logger.error("error: %s", exc)
        return exc.exit_code


__all__ = ["build_parser", "main"]
