"""Tests for error types and exit codes."""

from trill_sdk.errors import (
    ConfigError,
    ExecutableNotFoundError,
    ExitCode,
    ProcessExitError,
    ProcessLaunchError,
    ProtocolError,
    SchemaValidationError,
    StreamError,
    TrillError,
    TurnFailedError,
    TurnTimeoutError,
)


class TestExitCodes:
    def test_error_exit_codes(self) -> None:
        assert TrillError("x").exit_code == ExitCode.RUNTIME_ERROR
        assert ConfigError("x").exit_code == ExitCode.CONFIG_ERROR
        assert ExecutableNotFoundError().exit_code == ExitCode.CONFIG_ERROR
        assert ProcessLaunchError("x").exit_code == ExitCode.PROCESS_ERROR
        assert ProcessExitError(1).exit_code == ExitCode.PROCESS_ERROR
        assert TurnTimeoutError(5).exit_code == ExitCode.TIMEOUT

    def test_all_errors_are_trill_errors(self) -> None:
        for error in (
            ConfigError("x"),
            ProcessLaunchError("x"),
            ProcessExitError(2),
            TurnTimeoutError(1),
            ProtocolError("x"),
            StreamError("x"),
            TurnFailedError("x"),
            SchemaValidationError("x"),
        ):
            assert isinstance(error, TrillError)


class TestMessages:
    def test_executable_not_found(self) -> None:
        assert "/opt/trill" in str(ExecutableNotFoundError("/opt/trill"))
        assert "CODEX_EXECUTABLE" in str(ExecutableNotFoundError())

    def test_process_exit_includes_stderr(self) -> None:
        error = ProcessExitError(3, "boom\n")
        assert error.returncode == 3
        assert str(error) == "trill exited with code 3\n  stderr: boom"

    def test_process_exit_without_stderr(self) -> None:
        assert str(ProcessExitError(1)) == "trill exited with code 1"

    def test_timeout(self) -> None:
        assert str(TurnTimeoutError(2.5)) == "Turn timed out after 2.5 seconds"

    def test_protocol_error_truncates_line(self) -> None:
        error = ProtocolError("bad event", line="x" * 500)
        message = str(error)
        assert message.startswith("bad event\n  Line: ")
        assert "..." in message
        assert len(message) < 300

    def test_schema_validation_error_cause(self) -> None:
        cause = ValueError("status: invalid")
        error = SchemaValidationError("mismatch", response='{"a": 1}', cause=cause)
        message = str(error)
        assert "mismatch" in message
        assert "Caused by ValueError: status: invalid" in message
