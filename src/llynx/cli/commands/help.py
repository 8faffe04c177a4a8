from __future__ import annotations

import argparse
import logging
from typing import Optional

logger = logging.getLogger("llynx")


def _find_subparser(parser: argparse.ArgumentParser, name: str) -> Optional[argparse.ArgumentParser]:
    for action in parser._actions:
        if isinstance(action, argparse._SubParsersAction):
            return action.choices.get(name)
    return None


def cmd_help(args: argparse.Namespace) -> int:
    root = args.root_parser
    if not args.topic:
        root.print_help()
        return 0
    sub = _find_subparser(root, args.topic)
    if sub is None:
        root.print_usage()
        logger.error("error: %s", f"unknown command: {args.topic}")
        return 2
    sub.print_help()
    return 0


def register(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[name-defined]
    help_parser = subparsers.add_parser(
        "help",
        help="Show help for llynx or one of its commands.",
    )
    help_parser.add_argument(
        "topic",
        nargs="?",
        metavar="command",
        help="Command to describe.",
    )
    help_parser.set_defaults(func=cmd_help, needs_config=False)
