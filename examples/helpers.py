"""Shared helpers for the sample scripts."""

import os
from pathlib import Path


def trill_path_override() -> str:
    """Path to the trill executable used by the samples.

    Uses $CODEX_EXECUTABLE when set, otherwise the debug build in the
    neighbouring trill-rs checkout.
    """
    return os.environ.get("CODEX_EXECUTABLE") or str(
        Path.cwd() / ".." / ".." / "trill-rs" / "target" / "debug" / "trill"
    )
