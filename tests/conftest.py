"""Shared test fixtures and fakes for Trill SDK tests."""

import json
import stat
import sys
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest

from trill_sdk.exec import AgentProcess, ExecArgs


class FakeAgentProcess(AgentProcess):
    """In-memory AgentProcess that replays scripted JSON lines.

    Each call to ``run`` consumes the next script from ``turns``. The ExecArgs
    of every call are recorded, along with the output schema file contents
    (the file is gone once the turn ends).
    """

    def __init__(self, *turns: list[dict[str, Any] | str]):
        self.turns = list(turns)
        self.calls: list[ExecArgs] = []
        self.schemas: list[dict[str, Any] | None] = []
        self.closed = 0

    async def run(self, args: ExecArgs) -> AsyncGenerator[str, None]:
        self.calls.append(args)
        if args.output_schema_file:
            self.schemas.append(json.loads(Path(args.output_schema_file).read_text()))
        else:
            self.schemas.append(None)

        script = self.turns.pop(0) if self.turns else []
        try:
            for event in script:
                yield event if isinstance(event, str) else json.dumps(event)
        finally:
            self.closed += 1


def agent_turn(
    text: str, thread_id: str = "thread-1", usage: dict[str, int] | None = None
) -> list[dict[str, Any]]:
    """Events of a successful turn ending with a single agent message."""
    return [
        {"type": "thread.started", "thread_id": thread_id},
        {"type": "turn.started"},
        {
            "type": "item.completed",
            "item": {"id": "item_0", "type": "agent_message", "text": text},
        },
        {
            "type": "turn.completed",
            "usage": usage
            or {"input_tokens": 42, "cached_input_tokens": 12, "output_tokens": 5},
        },
    ]


FAKE_TRILL_SCRIPT = '''#!{python}
"""Stand-in for the trill executable used by tests.

Replies with one agent message whose text is a JSON report of how it was
invoked. FAKE_TRILL_MODE switches to failure modes.
"""
import json
import os
import sys
import time

prompt = sys.stdin.read()
args = sys.argv[1:]
mode = os.environ.get("FAKE_TRILL_MODE", "ok")

if mode == "fail":
    sys.stderr.write("model not available\\n")
    sys.exit(3)
if mode == "hang":
    print(json.dumps({{"type": "turn.started"}}), flush=True)
    time.sleep(30)
if mode == "garbage":
    print("this is not json", flush=True)
    sys.exit(0)

schema = None
if "--output-schema" in args:
    with open(args[args.index("--output-schema") + 1]) as f:
        schema = json.load(f)

thread_id = args[args.index("resume") + 1] if "resume" in args else "thread-new"
report = {{"prompt": prompt, "args": args, "env": dict(os.environ), "schema": schema}}
events = [
    {{"type": "thread.started", "thread_id": thread_id}},
    {{"type": "turn.started"}},
    {{"type": "item.completed", "item": {{"id": "item_0", "type": "agent_message", "text": json.dumps(report)}}}},
    {{"type": "turn.completed", "usage": {{"input_tokens": 3, "cached_input_tokens": 0, "output_tokens": 1}}}},
]
for event in events:
    print(json.dumps(event), flush=True)
'''


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fake_trill(tmp_path: Path) -> str:
    """Path to an executable script that behaves like ``trill exec --experimental-json``."""
    script = tmp_path / "trill"
    script.write_text(FAKE_TRILL_SCRIPT.format(python=sys.executable))
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(script)
