"""Trill client facade."""

import logging

from .exec import AgentProcess, TrillExec
from .options import ThreadOptions, TrillOptions
from .thread import Thread

logger = logging.getLogger(__name__)


class Trill:
    """Main entry point for talking to the trill agent.

    Use ``start_thread()`` to start a new conversation or ``resume_thread()``
    to continue one started earlier.

    Example:
        trill = Trill(TrillOptions(config={"model": {"temperature": 0.2}}))
        thread = trill.start_thread()
        turn = await thread.run("Summarize repository status")
        print(turn.final_response)

    Args:
        options: Client options. Keyword arguments are accepted instead, as
            shorthand for building a TrillOptions.
        process: Process collaborator used to run turns. Defaults to a TrillExec
            built from the options.

    Raises:
        ConfigError: If the executable can't be resolved or the config
            overrides are invalid.
    """

    def __init__(
        self,
        options: TrillOptions | None = None,
        *,
        process: AgentProcess | None = None,
        **kwargs,
    ):
        if options is not None and kwargs:
            raise TypeError("Pass either a TrillOptions or keyword options, not both")
        self._options = options or TrillOptions(**kwargs)
        if process is None:
            process = TrillExec(
                executable_path=self._options.trill_path_override,
                env=self._options.env,
                config=self._options.config,
                base_url=self._options.base_url,
                api_key=self._options.api_key,
            )
            logger.debug("Using trill executable %s", process.executable_path)
        self._process = process

    @property
    def options(self) -> TrillOptions:
        return self._options

    def start_thread(self, options: ThreadOptions | None = None) -> Thread:
        """Start a new conversation with the agent.

        The thread id is assigned by the process once the first turn starts.
        """
        return Thread(self._process, options)

    def resume_thread(self, id: str, options: ThreadOptions | None = None) -> Thread:
        """Resume a conversation by thread id.

        Threads are persisted by the trill executable in ``~/.trill/sessions``.
        """
        return Thread(self._process, options, id=id)
