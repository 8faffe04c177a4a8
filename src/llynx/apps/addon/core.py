"""Addon operations built on LuaRocks and the settings file.

Last updated: 2026-10-18
"""

from __future__ import annotations

import logging
from typing import List, Optional, Set, Tuple

from ...core.config import EffectiveConfig
from ...core.errors import (
    LlynxError,
    NotFound,
    NotInstalled,
    ParseError,
    PartialFailure,
)
from . import settings as settings_store
from .listing import AddonRecord, filter_by_name, parse_listing, unique_versions
from .runner import LuaRocks, Runner

logger = logging.getLogger("llynx")

LIST_SOURCES = ("installed", "online", "enabled")


def list_addons(
    config: EffectiveConfig,
    source: str = "installed",
    *,
    filter_text: Optional[str] = None,
    latest_only: bool = False,
    runner: Optional[Runner] = None,
) -> List[Tuple[AddonRecord, bool]]:
    """List addons from the tree, the server, or the settings file.

    Args:
        config: Effective configuration.
        source: "installed", "online" or "enabled".
        filter_text: Keep only addons whose name contains this text.
        latest_only: Keep only the newest version of each addon.
        runner: Optional process runner override.

    Returns:
        List of (record, enabled) pairs.
    """
    if source not in LIST_SOURCES:
        raise ValueError(f"Unknown listing source: {source}")
    rocks = LuaRocks(config, runner)

    if source == "online":
        records = unique_versions(parse_listing(rocks.search(filter_text), latest_only=latest_only))
        records = filter_by_name(records, filter_text)
        enabled = _enabled_keys_soft(config)
        return [(record, (record.name, record.version) in enabled) for record in records]

    if source == "installed":
        records = filter_by_name(
            parse_listing(rocks.list_installed(filter_text), latest_only=latest_only),
            filter_text,
        )
        enabled = _enabled_keys_soft(config)
        return [(record, (record.name, record.version) in enabled) for record in records]

    # only one version of an addon is enabled at a time, so latest_only does not apply
    doc = settings_store.load_or_create(config.settings)
    records = filter_by_name(parse_listing(rocks.list_installed(filter_text)), filter_text)
    enabled_entries = settings_store.enabled_addons(doc, config.tree)
    enabled = {(record.name, record.version) for record, _ in enabled_entries}
    installed = {(record.name, record.version) for record in records}
    for record, entry in enabled_entries:
        if filter_text and filter_text not in record.name:
            continue
        if (record.name, record.version) not in installed:
            logger.warning(
                "Enabled addon %s %s is not installed in %s (%s).",
                record.name,
                record.version,
                config.tree,
                entry,
            )
    return [(record, True) for record in records if (record.name, record.version) in enabled]


def install(
    config: EffectiveConfig,
    name: str,
    version: Optional[str] = None,
    *,
    runner: Optional[Runner] = None,
) -> Optional[AddonRecord]:
    """Install an addon into the rocks tree.

    The settings file is not touched; installing does not enable.

    Returns:
        The installed record as reported by the tree, or None if LuaRocks
        succeeded but the addon does not show up in the listing.
    """
    rocks = LuaRocks(config, runner)
    rocks.install(name, version)
    installed = _installed(rocks, name)
    if version:
        for record in installed:
            if record.version == version:
                return record
    return installed[0] if installed else None


def remove(
    config: EffectiveConfig,
    name: str,
    version: Optional[str] = None,
    *,
    runner: Optional[Runner] = None,
) -> List[str]:
    """Remove an addon from the tree and disable it in the settings file.

    Args:
        config: Effective configuration.
        name: Addon name.
        version: Remove only this version.
        runner: Optional process runner override.

    Returns:
        Library entries that were removed from the settings file.
    """
    rocks = LuaRocks(config, runner)
    installed = [
        record
        for record in _installed(rocks, name)
        if version is None or record.version == version
    ]
    if not installed:
        label = f"{name} {version}" if version else name
        raise NotFound(f"addon '{label}' is not installed; nothing to remove", name=name)

    rocks.remove(name, version)

    try:
        doc = settings_store.load_or_create(config.settings)
        entries = [
            entry
            for record, entry in settings_store.enabled_addons(doc, config.tree)
            if record.name == name and (version is None or record.version == version)
        ]
        doc, changed = _disable_entries(doc, entries)
        if changed:
            settings_store.save(config.settings, doc)
    except LlynxError as exc:
        raise PartialFailure(
            f"removed '{name}' from {config.tree} but could not update {config.settings}",
            cause=exc,
        ) from exc
    return entries


def enable(
    config: EffectiveConfig,
    name: str,
    *,
    runner: Optional[Runner] = None,
) -> Optional[str]:
    """Add an installed addon to the settings file.

    Returns:
        The library entry that was added, or None if a version of the addon
        was already enabled.
    """
    doc = settings_store.load_or_create(config.settings)
    for record, _ in settings_store.enabled_addons(doc, config.tree):
        if record.name == name:
            logger.info("Addon '%s' is already enabled (%s).", name, record.version)
            return None

    installed = _installed(LuaRocks(config, runner), name)
    if not installed:
        raise NotInstalled(name)
    newest = installed[0]
    if not newest.location:
        raise ParseError(f"LuaRocks did not report where '{name}' is installed.")
    identifier = settings_store.addon_identifier(newest)

    doc, changed = settings_store.set_enabled(doc, identifier, True)
    if changed:
        settings_store.save(config.settings, doc)
    return identifier


def disable(config: EffectiveConfig, name: str) -> List[str]:
    """Remove every enabled version of an addon from the settings file.

    Returns:
        Library entries that were removed.
    """
    doc = settings_store.load_or_create(config.settings)
    entries = [
        entry
        for record, entry in settings_store.enabled_addons(doc, config.tree)
        if record.name == name
    ]
    if not entries:
        raise NotFound(f"addon '{name}' is not enabled; nothing to disable", name=name)
    doc, changed = _disable_entries(doc, entries)
    if changed:
        settings_store.save(config.settings, doc)
    return entries


def _installed(rocks: LuaRocks, name: str) -> List[AddonRecord]:
    return [record for record in parse_listing(rocks.list_installed(name)) if record.name == name]


def _disable_entries(doc, entries: List[str]):
    changed = False
    for entry in entries:
        doc, removed = settings_store.set_enabled(doc, entry, False)
        changed = changed or removed
    return doc, changed


def _enabled_keys_soft(config: EffectiveConfig) -> Set[Tuple[str, str]]:
    try:
        doc = settings_store.load_or_create(config.settings)
    except LlynxError as exc:
        logger.warning("Could not read enabled addons: %s", exc)
        return set()
    return {(record.name, record.version) for record, _ in settings_store.enabled_addons(doc, config.tree)}


__all__ = [
    "LIST_SOURCES",
    "disable",
    "enable",
    "install",
    "list_addons",
    "remove",
]
