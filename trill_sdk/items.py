"""Thread items reported by the trill process.

Each item is one unit of agent work within a turn: a message, a shell
command, a file patch, a tool call. Items arrive in ``item.*`` events and are
normalized here into dataclasses.
"""

from dataclasses import dataclass, field
from typing import Any, Literal

CommandExecutionStatus = Literal["in_progress", "completed", "failed", "declined"]
PatchApplyStatus = Literal["completed", "failed"]
PatchChangeKind = Literal["add", "delete", "update"]
McpToolCallStatus = Literal["in_progress", "completed", "failed"]


@dataclass
class AgentMessageItem:
    """Response from the agent. Either natural language or JSON matching the output schema."""

    id: str
    text: str
    type: str = "agent_message"


@dataclass
class ReasoningItem:
    """The agent's summarized reasoning."""

    id: str
    text: str
    type: str = "reasoning"


@dataclass
class CommandExecutionItem:
    """A shell command run by the agent."""

    id: str
    command: str
    aggregated_output: str = ""
    exit_code: int | None = None
    status: CommandExecutionStatus = "in_progress"
    type: str = "command_execution"


@dataclass
class FileUpdateChange:
    path: str
    kind: PatchChangeKind


@dataclass
class FileChangeItem:
    """A set of file changes applied by the agent."""

    id: str
    changes: list[FileUpdateChange] = field(default_factory=list)
    status: PatchApplyStatus = "completed"
    type: str = "file_change"


@dataclass
class McpToolCallItem:
    """A call to a tool exposed by an MCP server."""

    id: str
    server: str
    tool: str
    status: McpToolCallStatus = "in_progress"
    type: str = "mcp_tool_call"


@dataclass
class WebSearchItem:
    id: str
    query: str
    type: str = "web_search"


@dataclass
class TodoItem:
    text: str
    completed: bool = False


@dataclass
class TodoListItem:
    """The agent's running to-do list."""

    id: str
    items: list[TodoItem] = field(default_factory=list)
    type: str = "todo_list"


@dataclass
class ErrorItem:
    """A non-fatal error surfaced as an item."""

    id: str
    message: str
    type: str = "error"


@dataclass
class UnknownItem:
    """An item type this SDK version doesn't know about.

    Kept as raw data so newer executables don't break older clients.
    """

    id: str
    type: str
    data: dict[str, Any] = field(default_factory=dict)


ThreadItem = (
    AgentMessageItem
    | ReasoningItem
    | CommandExecutionItem
    | FileChangeItem
    | McpToolCallItem
    | WebSearchItem
    | TodoListItem
    | ErrorItem
    | UnknownItem
)


def parse_item(data: dict[str, Any]) -> ThreadItem:
    """Build a ThreadItem from its wire representation.

    Raises:
        KeyError: If a required field is missing.
        TypeError: If the data is not a JSON object.
    """
    if not isinstance(data, dict):
        raise TypeError(f"Item must be an object, got {type(data).__name__}")

    item_type = data["type"]
    item_id = str(data["id"])

    if item_type == "agent_message":
        return AgentMessageItem(id=item_id, text=data.get("text", ""))
    if item_type == "reasoning":
        return ReasoningItem(id=item_id, text=data.get("text", ""))
    if item_type == "command_execution":
        return CommandExecutionItem(
            id=item_id,
            command=data["command"],
            aggregated_output=data.get("aggregated_output", ""),
            exit_code=data.get("exit_code"),
            status=data.get("status", "in_progress"),
        )
    if item_type == "file_change":
        changes = [
            FileUpdateChange(path=c["path"], kind=c["kind"])
            for c in data.get("changes", [])
        ]
        return FileChangeItem(
            id=item_id, changes=changes, status=data.get("status", "completed")
        )
    if item_type == "mcp_tool_call":
        return McpToolCallItem(
            id=item_id,
            server=data["server"],
            tool=data["tool"],
            status=data.get("status", "in_progress"),
        )
    if item_type == "web_search":
        return WebSearchItem(id=item_id, query=data.get("query", ""))
    if item_type == "todo_list":
        todos = [
            TodoItem(text=t["text"], completed=bool(t.get("completed", False)))
            for t in data.get("items", [])
        ]
        return TodoListItem(id=item_id, items=todos)
    if item_type == "error":
        return ErrorItem(id=item_id, message=data.get("message", ""))

    return UnknownItem(id=item_id, type=str(item_type), data=data)
