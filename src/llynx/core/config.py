from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for Python < 3.11
    import tomli as tomllib  # type: ignore[no-redef]

import jsonschema
import yaml

from .errors import ConfigError

logger = logging.getLogger("llynx")

DEFAULT_CONFIG_PATH = ".llynx.toml"
CONFIG_KEYS = ("luarocks", "tree", "settings", "server", "verbose")
DEFAULTS: Mapping[str, Any] = MappingProxyType(
    {
        "luarocks": "luarocks",
        "tree": ".lls_addons",
        "settings": ".vscode/settings.json",
        "server": "https://luarocks.org/m/lls-addons",
        "verbose": 0,
    }
)


@dataclass(frozen=True)
class EffectiveConfig:
    luarocks: str
    tree: str
    settings: str
    server: str
    verbose: int = 0


def default_config() -> EffectiveConfig:
    return EffectiveConfig(**DEFAULTS)


def load_config(path: Optional[Union[str, Path]] = None) -> Optional[Dict[str, Any]]:
    """Read and validate a TOML config file.

    Args:
        path: Explicit config file. When omitted, ``.llynx.toml`` in the
            current directory is used if it exists.

    Returns:
        The parsed mapping, or None when no file applies.
    """
    explicit = path is not None
    target = Path(path) if explicit else Path(DEFAULT_CONFIG_PATH)
    try:
        text = target.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        if explicit:
            raise ConfigError(f"Config file not found: {target}") from exc
        logger.debug("Default config file not found, using defaults.")
        return None
    except OSError as exc:
        raise ConfigError(f"Could not read config file {target}: {exc}") from exc
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Could not parse config file {target}: {exc}") from exc
    validate_config(data, source=target)
    logger.debug("Loaded config file: %s", target)
    return data


def validate_config(data: Mapping[str, Any], source: Optional[Path] = None) -> None:
    """Check config values against the bundled schema.

    Unknown keys are accepted and ignored.
    """
    validator = jsonschema.Draft202012Validator(_load_schema())
    errors: List[str] = []
    for err in sorted(validator.iter_errors(data), key=lambda e: list(e.path)):
        key = ".".join(str(p) for p in err.path)
        errors.append(f"{key or 'config'}: {err.message}")
    if errors:
        label = f" {source}" if source is not None else ""
        raise ConfigError(f"Invalid config file{label}: " + "; ".join(errors))
    for key in data:
        if key not in CONFIG_KEYS and key != "$schema":
            logger.debug("Ignoring unknown config key: %s", key)


def resolve(
    cli_overrides: Optional[Mapping[str, Any]] = None,
    file_overrides: Optional[Mapping[str, Any]] = None,
) -> EffectiveConfig:
    """Merge defaults, config file values and CLI flags.

    CLI flags win over the config file, which wins over the defaults. A value
    of None means "not set" at that level.

    Args:
        cli_overrides: Values taken from command-line flags.
        file_overrides: Values read from the config file.

    Returns:
        The effective configuration for this run.
    """
    merged: Dict[str, Any] = dict(DEFAULTS)
    for overrides in (file_overrides, cli_overrides):
        if not overrides:
            continue
        for key in CONFIG_KEYS:
            value = overrides.get(key)
            if value is not None:
                merged[key] = value
    config = EffectiveConfig(**merged)
    _check_usable(config)
    return config


def from_args(args: argparse.Namespace) -> EffectiveConfig:
    file_overrides = load_config(getattr(args, "config", None))
    verbose = getattr(args, "verbose", 0) or 0
    cli_overrides = {
        "luarocks": getattr(args, "luarocks", None),
        "tree": getattr(args, "tree", None),
        "settings": getattr(args, "settings", None),
        "server": getattr(args, "server", None),
        # -v absent means "not set", so a file value can still apply.
        "verbose": verbose if verbose > 0 else None,
    }
    return resolve(cli_overrides, file_overrides)


def configure_logging(verbosity: int = 0, stream=None) -> logging.Logger:
    level = logging.INFO if verbosity <= 0 else logging.DEBUG
    if not logging.getLogger().handlers:
        if level == logging.INFO:
            fmt = "%(message)s"
        else:
            fmt = "%(levelname)s %(asctime)s %(message)s"
        logging.basicConfig(level=level, format=fmt, stream=stream)
    pkg_logger = logging.getLogger("llynx")
    pkg_logger.setLevel(level)
    return pkg_logger


def _check_usable(config: EffectiveConfig) -> None:
    for key in ("luarocks", "tree", "settings", "server"):
        value = getattr(config, key)
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"Option '{key}' must be a non-empty string.")
    if not isinstance(config.verbose, int) or config.verbose < 0:
        raise ConfigError("Option 'verbose' must be a non-negative integer.")
    tree = Path(config.tree)
    if tree.exists() and not tree.is_dir():
        raise ConfigError(f"Rocks tree is not a directory: {tree}")
    settings = Path(config.settings)
    if settings.is_dir():
        raise ConfigError(f"Settings file is a directory: {settings}")


def _load_schema() -> Dict[str, Any]:
    with resources.files("llynx.schema").joinpath("config.yaml").open(
        "r", encoding="utf-8"
    ) as handle:
        return yaml.safe_load(handle)


__all__ = [
    "CONFIG_KEYS",
    "DEFAULTS",
    "DEFAULT_CONFIG_PATH",
    "EffectiveConfig",
    "configure_logging",
    "default_config",
    "from_args",
    "load_config",
    "resolve",
    "validate_config",
]
