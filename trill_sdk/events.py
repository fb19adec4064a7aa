"""Thread events emitted by ``trill exec --experimental-json``.

The process writes one JSON object per stdout line. ``parse_event`` turns a
line into one of the event dataclasses below.
"""

import json
from dataclasses import dataclass
from typing import Any

from .errors import ProtocolError
from .items import ThreadItem, parse_item


@dataclass
class Usage:
    """Token usage for a turn."""

    input_tokens: int = 0
    cached_input_tokens: int = 0
    output_tokens: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "input_tokens": self.input_tokens,
            "cached_input_tokens": self.cached_input_tokens,
            "output_tokens": self.output_tokens,
        }


@dataclass
class ThreadStartedEvent:
    """First event of a new thread; carries the id used to resume it later."""

    thread_id: str
    type: str = "thread.started"


@dataclass
class TurnStartedEvent:
    type: str = "turn.started"


@dataclass
class TurnCompletedEvent:
    usage: Usage
    type: str = "turn.completed"


@dataclass
class TurnFailedEvent:
    message: str
    type: str = "turn.failed"


@dataclass
class ItemStartedEvent:
    item: ThreadItem
    type: str = "item.started"


@dataclass
class ItemUpdatedEvent:
    item: ThreadItem
    type: str = "item.updated"


@dataclass
class ItemCompletedEvent:
    item: ThreadItem
    type: str = "item.completed"


@dataclass
class ThreadErrorEvent:
    """Fatal error emitted by the stream."""

    message: str
    type: str = "error"


ThreadEvent = (
    ThreadStartedEvent
    | TurnStartedEvent
    | TurnCompletedEvent
    | TurnFailedEvent
    | ItemStartedEvent
    | ItemUpdatedEvent
    | ItemCompletedEvent
    | ThreadErrorEvent
)

_ITEM_EVENTS = {
    "item.started": ItemStartedEvent,
    "item.updated": ItemUpdatedEvent,
    "item.completed": ItemCompletedEvent,
}


def parse_event(line: str) -> ThreadEvent:
    """Parse one JSON line from the process into a ThreadEvent.

    Raises:
        ProtocolError: If the line is not a JSON object or describes an
            unknown or malformed event.
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"Failed to parse event: {e}", line=line) from e

    if not isinstance(data, dict):
        raise ProtocolError("Event must be a JSON object", line=line)

    try:
        return _build_event(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ProtocolError(f"Malformed event: {e!r}", line=line) from e


def _build_event(data: dict[str, Any]) -> ThreadEvent:
    event_type = data.get("type")

    if event_type == "thread.started":
        return ThreadStartedEvent(thread_id=str(data["thread_id"]))
    if event_type == "turn.started":
        return TurnStartedEvent()
    if event_type == "turn.completed":
        usage = _object_field(data, "usage")
        return TurnCompletedEvent(
            usage=Usage(
                input_tokens=int(usage.get("input_tokens", 0)),
                cached_input_tokens=int(usage.get("cached_input_tokens", 0)),
                output_tokens=int(usage.get("output_tokens", 0)),
            )
        )
    if event_type == "turn.failed":
        error = _object_field(data, "error")
        return TurnFailedEvent(message=str(error.get("message", "Turn failed")))
    if event_type in _ITEM_EVENTS:
        return _ITEM_EVENTS[event_type](item=parse_item(data["item"]))
    if event_type == "error":
        return ThreadErrorEvent(message=str(data.get("message", "Unknown error")))

    raise ValueError(f"unknown event type {event_type!r}")


def _object_field(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise TypeError(f"{key!r} must be an object, got {type(value).__name__}")
    return value
