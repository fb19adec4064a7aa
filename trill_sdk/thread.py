"""Conversation threads.

A Thread is a handle on one conversation with the agent. The conversation
state lives with the trill executable (under ``~/.trill/sessions``); the
handle only remembers the thread id so later turns resume the same session.
"""

import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import aclosing
from dataclasses import asdict, dataclass, field
from typing import Any

import anyio
from pydantic import BaseModel

from .errors import StreamError, TrillError, TurnFailedError
from .events import (
    ItemCompletedEvent,
    ThreadErrorEvent,
    ThreadEvent,
    ThreadStartedEvent,
    TurnCompletedEvent,
    TurnFailedEvent,
    Usage,
    parse_event,
)
from .exec import AgentProcess, ExecArgs
from .items import AgentMessageItem, ThreadItem
from .options import ThreadOptions, TurnOptions
from .schema import output_schema_file, resolve_output_schema, validate_response

logger = logging.getLogger(__name__)


@dataclass
class TextInput:
    text: str
    type: str = "text"


@dataclass
class LocalImageInput:
    path: str
    type: str = "local_image"


UserInput = TextInput | LocalImageInput
Input = str | Sequence[UserInput]


@dataclass
class Turn:
    """Result of a completed turn.

    Attributes:
        items: Items completed during the turn, in order
        final_response: Text of the last agent message
        usage: Token usage reported by the process (None if not reported)
        parsed: Final response validated into the requested pydantic model
    """

    items: list[ThreadItem] = field(default_factory=list)
    final_response: str = ""
    usage: Usage | None = None
    parsed: BaseModel | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "final_response": self.final_response,
            "items": [asdict(item) for item in self.items],
            "usage": self.usage.to_dict() if self.usage else None,
        }
        if self.parsed is not None:
            result["parsed"] = self.parsed.model_dump(mode="json")
        return result


def normalize_input(input: Input) -> tuple[str, list[str]]:
    """Split user input into prompt text and image paths.

    Text entries are joined with blank lines.
    """
    if isinstance(input, str):
        return input, []

    texts: list[str] = []
    images: list[str] = []
    for entry in input:
        if isinstance(entry, TextInput):
            texts.append(entry.text)
        elif isinstance(entry, LocalImageInput):
            images.append(entry.path)
        else:
            raise TypeError(f"Unsupported input entry: {entry!r}")
    return "\n\n".join(texts), images


class Thread:
    """A conversation with the agent.

    Turns on a thread run one after another; a Thread must not be shared by
    concurrent callers.

    Example:
        thread = trill.start_thread()
        turn = await thread.run("Diagnose the failing test")
        print(turn.final_response)
        turn = await thread.run("Now fix it")
    """

    def __init__(
        self,
        process: AgentProcess,
        thread_options: ThreadOptions | None = None,
        id: str | None = None,
    ):
        self._process = process
        self._thread_options = thread_options or ThreadOptions()
        self._id = id
        self._running = False

    @property
    def id(self) -> str | None:
        """Thread id. None until the first turn of a new thread starts."""
        return self._id

    @property
    def options(self) -> ThreadOptions:
        return self._thread_options

    async def run_streamed(
        self, input: Input, turn_options: TurnOptions | None = None
    ) -> AsyncGenerator[ThreadEvent, None]:
        """Run a turn and yield events as the agent produces them.

        The thread stays busy until the generator is exhausted or closed. A
        caller that may stop early should close it explicitly, for example
        with ``contextlib.aclosing``; an abandoned generator keeps the thread
        marked as running until it is garbage collected.

        Args:
            input: Prompt text, or a list of text and image entries
            turn_options: Output schema and timeout for this turn

        Yields:
            ThreadEvent instances, in the order the process emits them

        Raises:
            TrillError: If a turn is already running on this thread
            ConfigError: If the output schema is invalid
            ProtocolError: If the process emits a malformed event
        """
        turn_options = turn_options or TurnOptions()
        if self._running:
            raise TrillError("A turn is already running on this thread")

        schema, _ = resolve_output_schema(turn_options.output_schema)
        prompt, images = normalize_input(input)

        self._running = True
        try:
            with output_schema_file(schema) as schema_path:
                args = ExecArgs(
                    input=prompt,
                    images=images,
                    thread_id=self._id,
                    thread_options=self._thread_options,
                    output_schema_file=schema_path,
                    timeout=turn_options.timeout,
                )
                async with aclosing(self._process.run(args)) as lines:
                    async for line in lines:
                        event = parse_event(line)
                        if isinstance(event, ThreadStartedEvent):
                            logger.debug("Thread started: %s", event.thread_id)
                            self._id = event.thread_id
                        yield event
        finally:
            self._running = False

    async def run(self, input: Input, turn_options: TurnOptions | None = None) -> Turn:
        """Run a turn and wait for it to finish.

        Args:
            input: Prompt text, or a list of text and image entries
            turn_options: Output schema and timeout for this turn

        Returns:
            Turn with completed items, final response and usage

        Raises:
            TurnFailedError: If the agent reports the turn failed
            StreamError: If the process reports a fatal stream error
            SchemaValidationError: If the response doesn't match a pydantic
                output model
        """
        turn_options = turn_options or TurnOptions()
        _, model = resolve_output_schema(turn_options.output_schema)

        turn = Turn()
        async with aclosing(self.run_streamed(input, turn_options)) as events:
            async for event in events:
                if isinstance(event, ItemCompletedEvent):
                    if isinstance(event.item, AgentMessageItem):
                        turn.final_response = event.item.text
                    turn.items.append(event.item)
                elif isinstance(event, TurnCompletedEvent):
                    turn.usage = event.usage
                elif isinstance(event, TurnFailedEvent):
                    raise TurnFailedError(event.message, thread_id=self._id)
                elif isinstance(event, ThreadErrorEvent):
                    raise StreamError(event.message)

        if model is not None:
            turn.parsed = validate_response(model, turn.final_response)
        return turn

    def run_sync(self, input: Input, turn_options: TurnOptions | None = None) -> Turn:
        """Blocking version of ``run`` for code without an event loop."""
        return anyio.run(self.run, input, turn_options)
