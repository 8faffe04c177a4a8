"""Read and update the editor settings file.

The only key owned here is ``Lua.workspace.library``; every other key is
carried through unchanged. The file may contain comments and trailing
commas (JSONC); it is written back as plain JSON.

Last updated: 2026-10-18
"""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from pathlib import Path, PurePath
from typing import Any, Dict, List, Optional, Tuple, Union

import json5

from ...core.errors import ParseError, SettingsIOError
from .listing import AddonRecord

logger = logging.getLogger("llynx")

LIBRARY_KEY = "Lua.workspace.library"
TYPES_DIRNAME = "types"


def load_or_create(path: Union[str, Path]) -> Dict[str, Any]:
    """Load the settings document, or an empty one if the file is missing.

    Args:
        path: Settings JSON file.

    Returns:
        The parsed document with key order preserved.
    """
    target = Path(path)
    try:
        text = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("Settings file %s not found, starting from an empty document.", target)
        return {}
    except OSError as exc:
        raise SettingsIOError(f"Could not read settings file {target}: {exc}", path=str(target)) from exc
    if not text.strip():
        return {}
    try:
        data = json5.loads(text)
    except ValueError as exc:
        raise ParseError(f"Could not parse settings file {target}: {exc}", path=str(target)) from exc
    if not isinstance(data, dict):
        raise ParseError(f"Settings file {target} must contain a JSON object.", path=str(target))
    library = data.get(LIBRARY_KEY)
    if library is not None and not (
        isinstance(library, list) and all(isinstance(item, str) for item in library)
    ):
        raise ParseError(
            f"'{LIBRARY_KEY}' in {target} must be a list of strings.",
            path=str(target),
        )
    return data


def list_enabled(doc: Dict[str, Any]) -> List[str]:
    return list(doc.get(LIBRARY_KEY) or [])


def set_enabled(doc: Dict[str, Any], identifier: str, enabled: bool) -> Tuple[Dict[str, Any], bool]:
    """Add or remove one library entry.

    Args:
        doc: Settings document; it is not modified.
        identifier: Library entry to add or remove.
        enabled: True to add, False to remove.

    Returns:
        Tuple of (document, changed). When nothing changes the input document
        is returned as-is.
    """
    library = list_enabled(doc)
    if enabled:
        if identifier in library:
            return doc, False
        library.append(identifier)
    else:
        if identifier not in library:
            return doc, False
        library = [item for item in library if item != identifier]
    new_doc = dict(doc)
    new_doc[LIBRARY_KEY] = library
    return new_doc, True


def save(path: Union[str, Path], doc: Dict[str, Any]) -> None:
    """Atomically replace the settings file with ``doc``.

    The document is written to a temporary file next to the target and moved
    over it, so a failed write leaves the old file in place.
    """
    target = Path(path)
    content = json.dumps(doc, indent=4, ensure_ascii=False) + "\n"
    tmp_name: Optional[str] = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.",
            suffix=".tmp",
            dir=str(target.parent),
        )
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.chmod(tmp_name, _file_mode(target))
        os.replace(tmp_name, target)
        tmp_name = None
    except OSError as exc:
        raise SettingsIOError(f"Could not write settings file {target}: {exc}", path=str(target)) from exc
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.debug("Could not remove temporary file %s", tmp_name)
    logger.debug("Wrote settings file: %s", target)


def _file_mode(target: Path) -> int:
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def addon_identifier(record: AddonRecord, cwd: Optional[Path] = None) -> str:
    """Return the library entry for an installed addon.

    The entry is the addon's ``types`` directory inside the rocks tree,
    relative to ``cwd`` when the tree lives below it.
    """
    if not record.location:
        raise ValueError(f"Installed addon '{record.name}' has no location.")
    path = Path(record.location) / record.name / record.version / TYPES_DIRNAME
    base = cwd if cwd is not None else Path.cwd()
    try:
        path = path.relative_to(base)
    except ValueError:
        pass
    return str(path)


def enabled_addons(
    doc: Dict[str, Any],
    tree: Union[str, Path],
    cwd: Optional[Path] = None,
) -> List[Tuple[AddonRecord, str]]:
    """Map library entries that point into the rocks tree back to addons.

    Args:
        doc: Settings document.
        tree: Rocks tree directory.
        cwd: Directory relative entries are resolved from.

    Returns:
        List of (record, library entry) pairs. Entries outside the tree are
        left alone.
    """
    base = cwd if cwd is not None else Path.cwd()
    prefix = _relative_parts(Path(tree), base) + ("lib", "luarocks")
    found: List[Tuple[AddonRecord, str]] = []
    for entry in list_enabled(doc):
        parts = _relative_parts(Path(entry), base)
        # <prefix>/rocks-<lua>/<name>/<version>/types
        if len(parts) < len(prefix) + 4 or parts[: len(prefix)] != prefix:
            continue
        if parts[-1] != TYPES_DIRNAME:
            continue
        record = AddonRecord(
            name=parts[-3],
            version=parts[-2],
            status="enabled",
            location=str(PurePath(*parts[:-3])),
        )
        found.append((record, entry))
    return found


def _relative_parts(path: Path, base: Path) -> Tuple[str, ...]:
    if path.is_absolute():
        try:
            path = path.relative_to(base)
        except ValueError:
            return path.parts
    return PurePath(os.path.normpath(str(path))).parts


__all__ = [
    "LIBRARY_KEY",
    "addon_identifier",
    "enabled_addons",
    "list_enabled",
    "load_or_create",
    "save",
    "set_enabled",
]
