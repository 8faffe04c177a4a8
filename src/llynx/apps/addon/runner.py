"""LuaRocks invocation.

Last updated: 2026-10-18
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from ...core.config import EffectiveConfig
from ...core.errors import InvocationFailed

logger = logging.getLogger("llynx")


@dataclass(frozen=True)
class ProcessResult:
    stdout: str
    stderr: str
    returncode: int


class Runner(Protocol):
    """Runs one external command to completion."""

    def run(self, args: Sequence[str]) -> ProcessResult:
        ...


class SubprocessRunner:
    """Runner backed by a blocking ``subprocess.run`` call."""

    def run(self, args: Sequence[str]) -> ProcessResult:
        try:
            completed = subprocess.run(
                list(args),
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )
        except FileNotFoundError as exc:
            raise InvocationFailed(
                f"Could not find executable '{args[0]}'. Is LuaRocks installed and on PATH?",
                command=args,
            ) from exc
        except OSError as exc:
            raise InvocationFailed(
                f"Could not run '{args[0]}': {exc}",
                command=args,
            ) from exc
        return ProcessResult(
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            returncode=completed.returncode,
        )


class LuaRocks:
    """Builds LuaRocks command lines for one effective configuration.

    Args:
        config: Effective configuration (executable, tree and server).
        runner: Process runner; defaults to :class:`SubprocessRunner`.
    """

    def __init__(self, config: EffectiveConfig, runner: Optional[Runner] = None) -> None:
        self.config = config
        self.runner: Runner = runner if runner is not None else SubprocessRunner()

    def list_installed(self, filter_text: Optional[str] = None) -> str:
        args = ["--tree", self.config.tree, "list"]
        if filter_text:
            args.append(filter_text)
        return self._run(args).stdout

    def search(self, filter_text: Optional[str] = None) -> str:
        args = ["--only-server", self.config.server, "search", filter_text or "--all"]
        return self._run(args).stdout

    def install(self, name: str, version: Optional[str] = None) -> ProcessResult:
        args = [
            "--tree",
            self.config.tree,
            "--server",
            self.config.server,
            "install",
            name,
        ]
        if version:
            args.append(version)
        result = self._run(args)
        _log_output(result)
        return result

    def remove(self, name: str, version: Optional[str] = None) -> ProcessResult:
        args = ["--tree", self.config.tree, "remove", name]
        if version:
            args.append(version)
        result = self._run(args)
        _log_output(result)
        return result

    def command(self, args: Sequence[str]) -> List[str]:
        return [self.config.luarocks, *args]

    def _run(self, args: Sequence[str]) -> ProcessResult:
        command = self.command(args)
        logger.debug("Executing: %s", shlex.join(command))
        result = self.runner.run(command)
        if result.returncode != 0:
            raise InvocationFailed(
                f"'{shlex.join(command)}' exited with status {result.returncode}",
                command=command,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result


def _log_output(result: ProcessResult) -> None:
    for line in result.stdout.splitlines():
        if line.strip():
            logger.debug("luarocks: %s", line)


__all__ = [
    "LuaRocks",
    "ProcessResult",
    "Runner",
    "SubprocessRunner",
]
