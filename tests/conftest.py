from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

import pytest

from llynx.apps.addon.runner import ProcessResult
from llynx.core import config as config_core

CONFIGS_DIR = Path(__file__).parent / "configs"

Response = Union[ProcessResult, Callable[[Sequence[str]], ProcessResult]]

SUBCOMMANDS = ("list", "search", "install", "remove")


class FakeRunner:
    """Runner that answers LuaRocks subcommands with canned output."""

    def __init__(self, responses: Optional[Dict[str, Response]] = None) -> None:
        self.responses: Dict[str, Response] = dict(responses or {})
        self.calls: List[List[str]] = []

    def run(self, args: Sequence[str]) -> ProcessResult:
        self.calls.append(list(args))
        sub = subcommand(args)
        response = self.responses.get(sub, ProcessResult("", "", 0))
        if callable(response):
            return response(args)
        return response

    def subcommands(self) -> List[str]:
        return [subcommand(call) for call in self.calls]


def subcommand(args: Sequence[str]) -> str:
    for arg in args:
        if arg in SUBCOMMANDS:
            return arg
    return ""


def ok(stdout: str = "") -> ProcessResult:
    return ProcessResult(stdout=stdout, stderr="", returncode=0)


def failed(stderr: str = "Error: boom", returncode: int = 1) -> ProcessResult:
    return ProcessResult(stdout="", stderr=stderr, returncode=returncode)


def installed_listing(tree: Union[str, Path], *addons) -> str:
    """Render ``luarocks list`` output for (name, [versions]) pairs."""
    location = Path(tree).resolve() / "lib" / "luarocks" / "rocks-5.1"
    lines = ["", "Rocks installed for Lua 5.1", "---------------------------", ""]
    for name, versions in addons:
        lines.append(name)
        for version in versions:
            lines.append(f"   {version} (installed) - {location}")
        lines.append("")
    return "\n".join(lines) + "\n"


def search_listing(server: str, *addons) -> str:
    """Render ``luarocks search`` output for (name, [versions]) pairs."""
    lines = ["", "Rocks matching: ", "---------------", ""]
    for name, versions in addons:
        lines.append(name)
        for version in versions:
            lines.append(f"   {version} (rockspec) - {server}")
            lines.append(f"   {version} (src) - {server}")
        lines.append("")
    return "\n".join(lines) + "\n"


def identifier(name: str, version: str) -> str:
    return str(Path(".lls_addons") / "lib" / "luarocks" / "rocks-5.1" / name / version / "types")


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def config(workspace: Path) -> config_core.EffectiveConfig:
    return config_core.default_config()


@pytest.fixture
def settings_path(workspace: Path) -> Path:
    return workspace / ".vscode" / "settings.json"
