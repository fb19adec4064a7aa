"""Client, thread and turn options."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, TypeAlias, Union

TrillConfigValue: TypeAlias = Union[
    str,
    int,
    float,
    bool,
    Sequence["TrillConfigValue"],
    Mapping[str, "TrillConfigValue"],
]
TrillConfigObject: TypeAlias = Mapping[str, TrillConfigValue]

SandboxMode = Literal["read-only", "workspace-write", "danger-full-access"]
ModelReasoningEffort = Literal["minimal", "low", "medium", "high", "xhigh"]
ApprovalMode = Literal["never", "on-request", "on-failure", "untrusted"]


@dataclass(frozen=True)
class TrillOptions:
    """Options for the Trill client.

    Attributes:
        trill_path_override: Path to the trill executable. Resolved from PATH
            when omitted.
        base_url: API base URL handed to the executable.
        api_key: API key handed to the executable.
        config: Nested ``--config key=value`` overrides. Flattened into dotted
            paths with values serialized as TOML literals.
        env: Environment for the trill process. When provided, the host
            environment is not inherited.
    """

    trill_path_override: str | None = None
    base_url: str | None = None
    api_key: str | None = None
    config: TrillConfigObject | None = None
    env: Mapping[str, str] | None = None


@dataclass(frozen=True)
class ThreadOptions:
    """Per-thread options, applied to every turn run on the thread."""

    model: str | None = None
    sandbox_mode: SandboxMode | None = None
    working_directory: str | None = None
    skip_git_repo_check: bool = False
    model_reasoning_effort: ModelReasoningEffort | None = None
    network_access_enabled: bool | None = None
    web_search_enabled: bool | None = None
    approval_policy: ApprovalMode | None = None
    additional_directories: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TurnOptions:
    """Per-turn options.

    Attributes:
        output_schema: JSON Schema dict, or a pydantic model class, that the
            final response must follow.
        timeout: Seconds to wait for the turn to finish. None waits forever.
    """

    output_schema: dict[str, Any] | type | None = None
    timeout: float | None = None
