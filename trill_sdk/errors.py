"""Trill SDK error types and exit codes."""

from enum import IntEnum
from typing import Any


class ExitCode(IntEnum):
    """Exit codes used by the ``python -m trill_sdk`` entry point."""

    SUCCESS = 0
    RUNTIME_ERROR = 1
    CONFIG_ERROR = 2
    PROCESS_ERROR = 3
    TIMEOUT = 4


class TrillError(Exception):
    """Base error for all Trill SDK errors."""

    exit_code: ExitCode = ExitCode.RUNTIME_ERROR


class ConfigError(TrillError):
    """Invalid client configuration, detected before any process is spawned."""

    exit_code = ExitCode.CONFIG_ERROR


class ExecutableNotFoundError(ConfigError):
    """The trill executable could not be resolved."""

    def __init__(self, path: str | None = None):
        self.path = path
        if path:
            msg = f"trill executable not found at '{path}'"
        else:
            msg = (
                "trill executable not found on PATH. "
                "Pass trill_path_override or set CODEX_EXECUTABLE."
            )
        super().__init__(msg)


class ProcessLaunchError(TrillError):
    """The trill process could not be started."""

    exit_code = ExitCode.PROCESS_ERROR


class ProcessExitError(TrillError):
    """The trill process exited with a non-zero status."""

    exit_code = ExitCode.PROCESS_ERROR

    def __init__(self, returncode: int, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"trill exited with code {returncode}")

    def __str__(self) -> str:
        parts = [self.args[0]]
        if self.stderr:
            parts.append(f"  stderr: {_truncate(self.stderr.strip(), 500)}")
        return "\n".join(parts)


class TurnTimeoutError(TrillError):
    """A turn did not finish within its timeout."""

    exit_code = ExitCode.TIMEOUT

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Turn timed out after {timeout:g} seconds")


class ProtocolError(TrillError):
    """The process emitted output that doesn't follow the event protocol."""

    def __init__(self, message: str, line: str | None = None):
        super().__init__(message)
        self.line = line

    def __str__(self) -> str:
        if self.line is None:
            return self.args[0]
        return f"{self.args[0]}\n  Line: {_truncate(self.line)!r}"


class StreamError(ProtocolError):
    """The process reported an unrecoverable stream error."""


class TurnFailedError(TrillError):
    """The agent reported that the turn failed."""

    def __init__(self, message: str, thread_id: str | None = None):
        super().__init__(message)
        self.thread_id = thread_id


class SchemaValidationError(TrillError):
    """The final response doesn't match the requested output model."""

    def __init__(self, message: str, response: str = "", cause: Exception | None = None):
        super().__init__(message)
        self.response = response
        self.cause = cause

    def __str__(self) -> str:
        parts = [self.args[0]]
        if self.response:
            parts.append(f"  Response: {_truncate(self.response)!r}")
        if self.cause:
            parts.append(f"  Caused by {type(self.cause).__name__}: {self.cause}")
        return "\n".join(parts)


def _truncate(value: Any, max_len: int = 200) -> Any:
    """Truncate long values for error display."""
    if isinstance(value, str) and len(value) > max_len:
        return value[:max_len] + "..."
    return value
