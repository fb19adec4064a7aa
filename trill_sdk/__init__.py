"""Trill SDK - Python client for the trill agent CLI."""

from .config import serialize_config_overrides
from .errors import (
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
from .events import (
    ItemCompletedEvent,
    ItemStartedEvent,
    ItemUpdatedEvent,
    ThreadErrorEvent,
    ThreadEvent,
    ThreadStartedEvent,
    TurnCompletedEvent,
    TurnFailedEvent,
    TurnStartedEvent,
    Usage,
)
from .exec import AgentProcess, ExecArgs, TrillExec
from .items import (
    AgentMessageItem,
    CommandExecutionItem,
    ErrorItem,
    FileChangeItem,
    McpToolCallItem,
    ReasoningItem,
    ThreadItem,
    TodoListItem,
    UnknownItem,
    WebSearchItem,
)
from .options import (
    ThreadOptions,
    TrillConfigObject,
    TrillConfigValue,
    TrillOptions,
    TurnOptions,
)
from .thread import LocalImageInput, TextInput, Thread, Turn, UserInput
from .trill import Trill

__version__ = "0.1.0"

__all__ = [
    "Trill",
    "Thread",
    "Turn",
    "TrillOptions",
    "ThreadOptions",
    "TurnOptions",
    "TrillConfigObject",
    "TrillConfigValue",
    "TextInput",
    "LocalImageInput",
    "UserInput",
    "AgentProcess",
    "ExecArgs",
    "TrillExec",
    "serialize_config_overrides",
    # Events
    "ThreadEvent",
    "ThreadStartedEvent",
    "TurnStartedEvent",
    "TurnCompletedEvent",
    "TurnFailedEvent",
    "ItemStartedEvent",
    "ItemUpdatedEvent",
    "ItemCompletedEvent",
    "ThreadErrorEvent",
    "Usage",
    # Items
    "ThreadItem",
    "AgentMessageItem",
    "ReasoningItem",
    "CommandExecutionItem",
    "FileChangeItem",
    "McpToolCallItem",
    "WebSearchItem",
    "TodoListItem",
    "ErrorItem",
    "UnknownItem",
    # Errors
    "TrillError",
    "ConfigError",
    "ExecutableNotFoundError",
    "ProcessLaunchError",
    "ProcessExitError",
    "TurnTimeoutError",
    "ProtocolError",
    "StreamError",
    "TurnFailedError",
    "SchemaValidationError",
    "ExitCode",
]
