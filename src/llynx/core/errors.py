"""Error types raised by llynx.

Every error carries the process exit status the CLI returns for it.

Last updated: 2026-10-18
"""

from __future__ import annotations

from typing import Optional, Sequence


class LlynxError(Exception):
    """Base class for errors reported to the user as a single line."""

    exit_code = 1


class ConfigError(LlynxError):
    """The config file or a resolved option is unusable."""

    exit_code = 3


class InvocationFailed(LlynxError):
    """LuaRocks could not be started or exited with a non-zero status."""

    exit_code = 4

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr


class ParseError(LlynxError):
    """Content did not have the expected shape."""

    exit_code = 5

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class SettingsIOError(LlynxError):
    """Reading or writing the settings file failed."""

    exit_code = 6

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class NotInstalled(LlynxError):
    exit_code = 7

    def __init__(self, name: str) -> None:
        super().__init__(f"addon '{name}' is not installed")
        self.name = name


class NotFound(LlynxError):
    """Nothing to do for the requested addon. Reported as a warning."""

    exit_code = 0

    def __init__(self, message: str, *, name: str) -> None:
        super().__init__(message)
        self.name = name


class PartialFailure(LlynxError):
    """The rocks tree changed but the settings file could not follow."""

    exit_code = 8

    def __init__(self, message: str, *, cause: LlynxError) -> None:
        super().__init__(f"{message}: {cause}")
        self.cause = cause


__all__ = [
    "LlynxError",
    "ConfigError",
    "InvocationFailed",
    "ParseError",
    "SettingsIOError",
    "NotInstalled",
    "NotFound",
    "PartialFailure",
]
