"""Structured output with a raw JSON Schema.

Usage:
    CODEX_EXECUTABLE=/path/to/trill python examples/structured_output.py
"""

import anyio

from helpers import trill_path_override
from trill_sdk import Trill, TurnOptions

SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {"type": "string"},
        "status": {"type": "string", "enum": ["ok", "action_required"]},
    },
    "required": ["summary", "status"],
    "additionalProperties": False,
}


async def main() -> None:
    trill = Trill(trill_path_override=trill_path_override())
    thread = trill.start_thread()

    turn = await thread.run(
        "Summarize repository status", TurnOptions(output_schema=SCHEMA)
    )
    print(turn.final_response)


if __name__ == "__main__":
    anyio.run(main)
