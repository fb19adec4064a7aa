"""Execution of the trill CLI as a subprocess.

``AgentProcess`` is the boundary between the conversation API and the
process that does the work. ``TrillExec`` is the real implementation: it runs
``trill exec --experimental-json``, writes the prompt to stdin and yields the
JSON lines the process prints on stdout. Tests swap in their own
``AgentProcess`` to script a conversation without spawning anything.
"""

import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field

import anyio
from anyio.streams.text import TextReceiveStream

from .config import serialize_config_overrides, to_toml_value
from .errors import (
    ExecutableNotFoundError,
    ProcessExitError,
    ProcessLaunchError,
    TurnTimeoutError,
)
from .options import ThreadOptions, TrillConfigObject

logger = logging.getLogger(__name__)

ORIGINATOR_ENV_VAR = "CODEX_INTERNAL_ORIGINATOR_OVERRIDE"
SDK_ORIGINATOR = "trill_sdk_py"
BASE_URL_ENV_VAR = "OPENAI_BASE_URL"
API_KEY_ENV_VAR = "CODEX_API_KEY"
DEFAULT_EXECUTABLE = "trill"


@dataclass
class ExecArgs:
    """Everything needed to run a single turn.

    Attributes:
        input: Prompt text written to the process's stdin
        images: Local image paths attached to the prompt
        thread_id: Thread to resume (None starts a new thread)
        thread_options: Options of the thread the turn runs on
        output_schema_file: Path to a JSON Schema file for the final response
        timeout: Seconds to wait for the process (None waits forever)
    """

    input: str
    images: list[str] = field(default_factory=list)
    thread_id: str | None = None
    thread_options: ThreadOptions = field(default_factory=ThreadOptions)
    output_schema_file: str | None = None
    timeout: float | None = None


class AgentProcess(ABC):
    """Runs one turn against an agent process.

    Subclasses must implement ``run`` as an async generator yielding the
    process's stdout lines, and must raise TrillError subclasses on failure.
    """

    @abstractmethod
    def run(self, args: ExecArgs) -> AsyncGenerator[str, None]:
        """Run a turn and yield each line of protocol output."""
        ...


def resolve_executable(path_override: str | None = None) -> str:
    """Resolve the trill executable path.

    Args:
        path_override: Explicit path or command name. Looked up on PATH
            (``trill``) when omitted.

    Returns:
        Path to the executable

    Raises:
        ExecutableNotFoundError: If the executable can't be found
    """
    if path_override:
        resolved = shutil.which(path_override)
        if not resolved:
            raise ExecutableNotFoundError(path_override)
        return resolved

    resolved = shutil.which(DEFAULT_EXECUTABLE)
    if not resolved:
        raise ExecutableNotFoundError()
    return resolved


class TrillExec(AgentProcess):
    """Runs turns through the trill CLI.

    The executable is resolved and the config overrides are flattened on
    construction, so configuration mistakes surface before any process is
    spawned.

    Example:
        trill_exec = TrillExec(config={"model": {"temperature": 0.2}})
        async for line in trill_exec.run(ExecArgs(input="hello")):
            print(line)
    """

    def __init__(
        self,
        executable_path: str | None = None,
        env: Mapping[str, str] | None = None,
        config: TrillConfigObject | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
    ):
        self.executable_path = resolve_executable(executable_path)
        self._env = dict(env) if env is not None else None
        self._config_overrides = (
            serialize_config_overrides(config) if config is not None else []
        )
        self._base_url = base_url
        self._api_key = api_key

    @property
    def config_overrides(self) -> list[str]:
        return list(self._config_overrides)

    def build_command(self, args: ExecArgs) -> list[str]:
        """Build the full argument vector for a turn.

        Thread options come after the client-wide overrides so the CLI lets
        them win.
        """
        opts = args.thread_options
        cmd = [self.executable_path, "exec", "--experimental-json"]

        for override in self._config_overrides:
            cmd.extend(["--config", override])

        if opts.model:
            cmd.extend(["--model", opts.model])
        if opts.sandbox_mode:
            cmd.extend(["--sandbox", opts.sandbox_mode])
        if opts.working_directory:
            cmd.extend(["--cd", opts.working_directory])
        for directory in opts.additional_directories:
            cmd.extend(["--add-dir", directory])
        if opts.skip_git_repo_check:
            cmd.append("--skip-git-repo-check")
        if args.output_schema_file:
            cmd.extend(["--output-schema", args.output_schema_file])

        thread_overrides = {
            "model_reasoning_effort": opts.model_reasoning_effort,
            "sandbox_workspace_write.network_access": opts.network_access_enabled,
            "features.web_search_request": opts.web_search_enabled,
            "approval_policy": opts.approval_policy,
        }
        for key, value in thread_overrides.items():
            if value is not None:
                cmd.extend(["--config", f"{key}={to_toml_value(value, key)}"])

        if args.thread_id:
            cmd.extend(["resume", args.thread_id])

        for image in args.images:
            cmd.extend(["--image", image])

        return cmd

    def build_env(self) -> dict[str, str]:
        """Build the environment for the trill process.

        The host environment is inherited only when no explicit env was given.
        """
        env = dict(self._env) if self._env is not None else dict(os.environ)
        if not env.get(ORIGINATOR_ENV_VAR):
            env[ORIGINATOR_ENV_VAR] = SDK_ORIGINATOR
        if self._base_url:
            env[BASE_URL_ENV_VAR] = self._base_url
        if self._api_key:
            env[API_KEY_ENV_VAR] = self._api_key
        return env

    async def run(self, args: ExecArgs) -> AsyncGenerator[str, None]:
        """Run a turn and yield stdout lines as they arrive.

        Raises:
            ProcessLaunchError: If the process can't be started
            ProcessExitError: If the process exits with a non-zero status
            TurnTimeoutError: If the turn exceeds ``args.timeout``
        """
        cmd = self.build_command(args)
        logger.debug("Spawning trill: %s", " ".join(cmd))

        deadline = (
            anyio.current_time() + args.timeout if args.timeout is not None else None
        )

        # stderr goes to a file so a chatty process can't block on a full pipe
        with tempfile.TemporaryFile() as stderr_file:
            try:
                process = await anyio.open_process(
                    cmd, env=self.build_env(), stderr=stderr_file
                )
            except OSError as e:
                raise ProcessLaunchError(
                    f"Failed to start trill at '{self.executable_path}': {e}"
                ) from e

            try:
                if process.stdin is None or process.stdout is None:
                    raise ProcessLaunchError(
                        f"trill at '{self.executable_path}' started without stdio pipes"
                    )

                with anyio.fail_after(_remaining(deadline)):
                    try:
                        await process.stdin.send(args.input.encode("utf-8"))
                    except (anyio.BrokenResourceError, anyio.ClosedResourceError):
                        # exited before reading its input; the exit code says why
                        logger.debug("trill closed stdin before reading the prompt")
                    await process.stdin.aclose()

                stdout = TextReceiveStream(process.stdout, errors="replace")
                buffer = ""
                while True:
                    try:
                        with anyio.fail_after(_remaining(deadline)):
                            chunk = await stdout.receive()
                    except anyio.EndOfStream:
                        break
                    buffer += chunk
                    while "\n" in buffer:
                        line, buffer = buffer.split("\n", 1)
                        if line.strip():
                            yield line
                if buffer.strip():
                    yield buffer

                with anyio.fail_after(_remaining(deadline)):
                    returncode = await process.wait()
            except TimeoutError as e:
                raise TurnTimeoutError(args.timeout or 0) from e
            finally:
                if process.returncode is None:
                    logger.debug("Killing trill (pid=%s)", process.pid)
                    process.kill()
                with anyio.CancelScope(shield=True):
                    await process.aclose()

            logger.debug("trill (pid=%s) exited with code %s", process.pid, returncode)
            if returncode != 0:
                stderr_file.seek(0)
                stderr = stderr_file.read().decode("utf-8", errors="replace")
                logger.warning("trill exited with code %s: %s", returncode, stderr.strip())
                raise ProcessExitError(returncode, stderr)


def _remaining(deadline: float | None) -> float | None:
    if deadline is None:
        return None
    return max(deadline - anyio.current_time(), 0)
