from __future__ import annotations

import itertools
import logging

import pytest

from llynx.cli.main import build_parser
from llynx.core import config as config_core
from llynx.core.errors import ConfigError

from conftest import CONFIGS_DIR

PATH_KEYS = ("luarocks", "tree", "settings", "server")


def test_defaults() -> None:
    config = config_core.default_config()
    assert config.luarocks == "luarocks"
    assert config.tree == ".lls_addons"
    assert config.settings == ".vscode/settings.json"
    assert config.server == "https://luarocks.org/m/lls-addons"
    assert config.verbose == 0


def test_defaults_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        config_core.DEFAULTS["tree"] = "elsewhere"  # type: ignore[index]


def test_effective_config_is_frozen() -> None:
    config = config_core.default_config()
    with pytest.raises(AttributeError):
        config.tree = "elsewhere"  # type: ignore[misc]


def test_load_empty() -> None:
    assert config_core.load_config(CONFIGS_DIR / "empty.toml") == {}


def test_load_schema_key_only() -> None:
    data = config_core.load_config(CONFIGS_DIR / "empty_schema.toml")
    assert data == {"$schema": ""}


def test_load_some_args() -> None:
    data = config_core.load_config(CONFIGS_DIR / "some_args.toml")
    assert data is not None
    assert data["luarocks"] == "some_luarocks"
    assert data["tree"] == "some_tree"
    assert "server" not in data
    assert "settings" not in data
    assert "verbose" not in data


def test_load_all_args() -> None:
    data = config_core.load_config(CONFIGS_DIR / "all_args.toml")
    assert data == {
        "$schema": "some_schema",
        "luarocks": "some_luarocks",
        "tree": "some_tree",
        "settings": "some_settings",
        "server": "some_server",
        "verbose": 8,
    }


def test_load_illegal_toml() -> None:
    with pytest.raises(ConfigError, match="Could not parse"):
        config_core.load_config(CONFIGS_DIR / "illegal.toml")


def test_load_wrong_types_reports_every_key() -> None:
    with pytest.raises(ConfigError) as excinfo:
        config_core.load_config(CONFIGS_DIR / "wrong_type.toml")
    message = str(excinfo.value)
    assert "tree" in message
    assert "verbose" in message


def test_unknown_keys_are_ignored(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="llynx")
    data = config_core.load_config(CONFIGS_DIR / "unknown_key.toml")
    assert data is not None
    config = config_core.resolve(file_overrides=data)
    assert config.tree == "some_tree"
    assert "Ignoring unknown config key: editor" in caplog.text


def test_explicit_missing_file_is_an_error(tmp_path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        config_core.load_config(tmp_path / "nope.toml")


def test_default_file_absent_means_no_overrides(workspace) -> None:
    assert config_core.load_config() is None


def test_default_file_is_picked_up(workspace) -> None:
    (workspace / ".llynx.toml").write_text('server = "file://./servers/one"\n', encoding="utf-8")
    data = config_core.load_config()
    assert data == {"server": "file://./servers/one"}


def test_extend_some_args() -> None:
    data = config_core.load_config(CONFIGS_DIR / "some_args.toml")
    config = config_core.resolve(file_overrides=data)
    assert config.luarocks == "some_luarocks"
    assert config.tree == "some_tree"
    assert config.server == config_core.DEFAULTS["server"]
    assert config.settings == config_core.DEFAULTS["settings"]
    assert config.verbose == 0


def test_extend_all_args() -> None:
    data = config_core.load_config(CONFIGS_DIR / "all_args.toml")
    config = config_core.resolve(file_overrides=data)
    assert config.luarocks == "some_luarocks"
    assert config.server == "some_server"
    assert config.settings == "some_settings"
    assert config.tree == "some_tree"
    assert config.verbose == 8


def test_precedence_over_every_subset(workspace) -> None:
    # each key is unset, set in the file, set on the CLI, or set in both
    for states in itertools.product(("none", "file", "cli", "both"), repeat=len(PATH_KEYS)):
        file_overrides = {}
        cli_overrides = {}
        for key, state in zip(PATH_KEYS, states):
            if state in ("file", "both"):
                file_overrides[key] = f"file_{key}"
            if state in ("cli", "both"):
                cli_overrides[key] = f"cli_{key}"
        config = config_core.resolve(cli_overrides, file_overrides)
        for key, state in zip(PATH_KEYS, states):
            expected = {
                "none": config_core.DEFAULTS[key],
                "file": f"file_{key}",
                "cli": f"cli_{key}",
                "both": f"cli_{key}",
            }[state]
            assert getattr(config, key) == expected, (key, states)


def test_verbose_precedence_with_tree(workspace) -> None:
    # verbose uses 0 on the command line to mean unset
    path = workspace / "llynx.toml"
    for verbose_state, tree_state in itertools.product(("none", "file", "cli", "both"), repeat=2):
        lines = []
        argv = ["-c", str(path)]
        if verbose_state in ("file", "both"):
            lines.append("verbose = 2")
        if verbose_state in ("cli", "both"):
            argv.append("-vvv")
        if tree_state in ("file", "both"):
            lines.append('tree = "file_tree"')
        if tree_state in ("cli", "both"):
            argv += ["--tree", "cli_tree"]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        config = config_core.from_args(build_parser().parse_args(argv + ["list"]))
        states = (verbose_state, tree_state)
        assert config.verbose == {"none": 0, "file": 2, "cli": 3, "both": 3}[verbose_state], states
        assert config.tree == {
            "none": config_core.DEFAULTS["tree"],
            "file": "file_tree",
            "cli": "cli_tree",
            "both": "cli_tree",
        }[tree_state], states


def test_tree_from_config_file_when_flag_absent(workspace) -> None:
    path = workspace / "llynx.toml"
    path.write_text('tree = "custom_tree"\n', encoding="utf-8")
    args = build_parser().parse_args(["--config", str(path), "list"])
    assert config_core.from_args(args).tree == "custom_tree"


def test_tree_flag_beats_config_file(workspace) -> None:
    path = workspace / "llynx.toml"
    path.write_text('tree = "custom_tree"\n', encoding="utf-8")
    args = build_parser().parse_args(["-c", str(path), "--tree", "flag_tree", "list"])
    assert config_core.from_args(args).tree == "flag_tree"


def test_verbosity_counts_and_falls_back_to_file(workspace) -> None:
    (workspace / ".llynx.toml").write_text("verbose = 1\n", encoding="utf-8")
    parser = build_parser()
    assert config_core.from_args(parser.parse_args(["list"])).verbose == 1
    assert config_core.from_args(parser.parse_args(["-vvv", "list"])).verbose == 3


def test_verbosity_defaults_to_zero(workspace) -> None:
    args = build_parser().parse_args(["list"])
    assert config_core.from_args(args).verbose == 0


def test_tree_that_is_a_file_is_unusable(workspace) -> None:
    (workspace / "tree").write_text("", encoding="utf-8")
    with pytest.raises(ConfigError, match="not a directory"):
        config_core.resolve({"tree": "tree"})


def test_settings_that_is_a_directory_is_unusable(workspace) -> None:
    (workspace / "settings.json").mkdir()
    with pytest.raises(ConfigError, match="is a directory"):
        config_core.resolve({"settings": "settings.json"})


def test_empty_cli_value_is_unusable(workspace) -> None:
    with pytest.raises(ConfigError, match="non-empty"):
        config_core.resolve({"luarocks": ""})
