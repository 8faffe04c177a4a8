"""Parser for the text output of ``luarocks list`` and ``luarocks search``.

Both commands print a package name on its own line followed by one indented
line per version::

    say
       1.4.1-3 (installed) - /work/.lls_addons/lib/luarocks/rocks-5.1

Titles, underlines, blank lines and summary sentences are ignored.

Last updated: 2026-10-18
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple

logger = logging.getLogger("llynx")

_HEADER = re.compile(r"^(?P<name>[A-Za-z0-9_][A-Za-z0-9_.+-]*)\s*$")
_VERSION = re.compile(
    r"^\s+(?P<version>\S+)\s+\((?P<status>[^)]*)\)(?:\s+-\s+(?P<location>.*?))?\s*$"
)


@dataclass(frozen=True)
class AddonRecord:
    name: str
    version: str
    status: Optional[str] = None
    location: Optional[str] = None


def parse_listing(text: str, *, latest_only: bool = False) -> List[AddonRecord]:
    """Convert LuaRocks listing output into addon records.

    Args:
        text: Captured standard output of ``list`` or ``search``.
        latest_only: Keep only the first version printed under each name.
            LuaRocks prints versions newest first.

    Returns:
        Records in output order. Lines that match neither a package name nor
        a version line are skipped.
    """
    records: List[AddonRecord] = []
    current: Optional[str] = None
    taken: Set[str] = set()
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.rstrip()
        if not line.strip():
            continue
        version_match = _VERSION.match(line)
        if version_match:
            if current is None:
                logger.warning(
                    "Skipping version line without a package name (line %d): %s",
                    lineno,
                    line.strip(),
                )
                continue
            if latest_only and current in taken:
                continue
            taken.add(current)
            records.append(
                AddonRecord(
                    name=current,
                    version=version_match.group("version"),
                    status=version_match.group("status").strip() or None,
                    location=version_match.group("location") or None,
                )
            )
            continue
        header_match = _HEADER.match(line)
        if header_match:
            current = header_match.group("name")
            continue
        if not line[0].isspace():
            # titles and summaries end the current package block
            current = None
        logger.debug("Ignoring listing line %d: %s", lineno, line.strip())
    return records


def unique_versions(records: Iterable[AddonRecord]) -> List[AddonRecord]:
    """Collapse repeated (name, version) entries, keeping the first one.

    ``luarocks search`` prints one line per archive kind (rockspec, src, all)
    for the same version.
    """
    seen: Set[Tuple[str, str]] = set()
    out: List[AddonRecord] = []
    for record in records:
        key = (record.name, record.version)
        if key in seen:
            continue
        seen.add(key)
        out.append(record)
    return out


def filter_by_name(records: Iterable[AddonRecord], text: Optional[str]) -> List[AddonRecord]:
    if not text:
        return list(records)
    return [record for record in records if text in record.name]


__all__ = [
    "AddonRecord",
    "filter_by_name",
    "parse_listing",
    "unique_versions",
]
