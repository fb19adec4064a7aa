"""Structured output with a schema generated from a pydantic model.

The final response is validated back into the model and available as
``turn.parsed``.

Usage:
    CODEX_EXECUTABLE=/path/to/trill python examples/structured_output_pydantic.py
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict

from helpers import trill_path_override
from trill_sdk import Trill, TurnOptions


class RepositoryStatus(BaseModel):
    model_config = ConfigDict(extra="forbid")

    summary: str
    status: Literal["ok", "action_required"]


def main() -> None:
    trill = Trill(trill_path_override=trill_path_override())
    thread = trill.start_thread()

    turn = thread.run_sync(
        "Summarize repository status", TurnOptions(output_schema=RepositoryStatus)
    )
    print(turn.final_response)
    print(f"status={turn.parsed.status}")


if __name__ == "__main__":
    main()
