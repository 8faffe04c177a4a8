"""Addon package entrypoint.

Last updated: 2026-10-18
"""
from __future__ import annotations


from .core import (
    LIST_SOURCES,
    disable,
    enable,
    install,
    list_addons,
    remove,
)
from .listing import AddonRecord, parse_listing
from .runner import LuaRocks, ProcessResult, Runner, SubprocessRunner

__all__ = [
    "LIST_SOURCES",
    "AddonRecord",
    "LuaRocks",
    "ProcessResult",
    "Runner",
    "SubprocessRunner",
    "disable",
    "enable",
    "install",
    "list_addons",
    "parse_listing",
    "remove",
]
