from __future__ import annotations
from typing import Dict, List, Tuple

import argparse
import logging

from llynx.apps import addon as addon_app
from llynx.apps.addon.listing import AddonRecord
from llynx.core import formatter

logger = logging.getLogger("llynx")


def _rows(pairs: List[Tuple[AddonRecord, bool]]) -> List[Dict[str, object]]:
    # stable sort keeps LuaRocks' newest-first order within a name
    ordered = sorted(pairs, key=lambda pair: pair[0].name)
    rows: List[Dict[str, object]] = []
    for record, enabled in ordered:
        rows.append(
            {
                "name": record.name,
                "version": record.version,
                "enabled": {"value": "yes", "color": "green"} if enabled else "",
            }
        )
    return rows


def cmd_list(args: argparse.Namespace) -> int:
    pairs = addon_app.list_addons(
        args.effective_config,
        args.source,
        filter_text=args.filter,
        latest_only=args.latest,
        runner=args.runner,
    )
    if not pairs:
        logger.warning("No addons found matching criteria.")
        return 0
    table = formatter.format_table(
        f"{args.source.capitalize()} addons",
        ("name", "version", "enabled"),
        _rows(pairs),
        colors={"name": "cyan", "version": "gray"},
        title_color="cyan",
    )
    logger.info("%s", table)
    return 0


def cmd_install(args: argparse.Namespace) -> int:
    config = args.effective_config
    record = addon_app.install(config, args.name, args.version, runner=args.runner)
    if record is None:
        logger.warning("LuaRocks finished but '%s' is not listed in %s.", args.name, config.tree)
        return 0
    logger.info("Installed %s %s", record.name, record.version)
    logger.info("Run `llynx enable %s` to use it in this workspace.", record.name)
    return 0


def cmd_remove(args: argparse.Namespace) -> int:
    config = args.effective_config
    disabled = addon_app.remove(config, args.name, args.version, runner=args.runner)
    label = f"{args.name} {args.version}" if args.version else args.name
    logger.info("Removed %s", label)
    if disabled:
        logger.info("Disabled %s in %s", args.name, config.settings)
    return 0


def cmd_enable(args: argparse.Namespace) -> int:
    config = args.effective_config
    identifier = addon_app.enable(config, args.name, runner=args.runner)
    if identifier is not None:
        logger.info("Enabled %s in %s", args.name, config.settings)
        logger.debug("Added library entry: %s", identifier)
    return 0


def cmd_disable(args: argparse.Namespace) -> int:
    config = args.effective_config
    removed = addon_app.disable(config, args.name)
    logger.info("Disabled %s in %s", args.name, config.settings)
    for entry in removed:
        logger.debug("Removed library entry: %s", entry)
    return 0


def register(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[name-defined]
    list_parser = subparsers.add_parser(
        "list",
        help="List installed, online, or enabled addons.",
    )
    list_parser.add_argument(
        "source",
        nargs="?",
        choices=addon_app.LIST_SOURCES,
        default="installed",
        help="Where to look for addons (default: installed).",
    )
    list_parser.add_argument(
        "-f",
        "--filter",
        help="Only include addons with this string in their names.",
    )
    list_parser.add_argument(
        "--latest",
        action="store_true",
        help="Show only the newest version of each addon.",
    )
    list_parser.set_defaults(func=cmd_list)

    install_parser = subparsers.add_parser("install", help="Install an addon.")
    install_parser.add_argument("name", help="The addon to install.")
    install_parser.add_argument("version", nargs="?", help="The version to install.")
    install_parser.set_defaults(func=cmd_install)

    remove_parser = subparsers.add_parser(
        "remove",
        help="Remove an addon and disable it for the current workspace.",
    )
    remove_parser.add_argument("name", help="The addon to remove.")
    remove_parser.add_argument("version", nargs="?", help="The specific version to remove.")
    remove_parser.set_defaults(func=cmd_remove)

    enable_parser = subparsers.add_parser(
        "enable",
        help="Enable an installed addon for the current workspace.",
    )
    enable_parser.add_argument("name", help="The addon to enable.")
    enable_parser.set_defaults(func=cmd_enable)

    disable_parser = subparsers.add_parser(
        "disable",
        help="Disable an addon for the current workspace.",
    )
    disable_parser.add_argument("name", help="The addon to disable.")
    disable_parser.set_defaults(func=cmd_disable)
