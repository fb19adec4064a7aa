"""Tests for the Trill client facade."""

import json
from pathlib import Path

import pytest

from conftest import FakeAgentProcess, agent_turn
from trill_sdk import Thread, ThreadOptions, Trill, TrillOptions, TurnOptions
from trill_sdk.errors import ConfigError, ExecutableNotFoundError
from trill_sdk.exec import TrillExec


class TestConstruction:
    """Tests for Trill construction and option handling."""

    def test_defaults_resolve_from_path(
        self, fake_trill: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PATH", str(Path(fake_trill).parent))
        trill = Trill()
        assert trill.options == TrillOptions()

    def test_keyword_options(self, fake_trill: str) -> None:
        trill = Trill(trill_path_override=fake_trill, api_key="sk-test")
        assert trill.options.trill_path_override == fake_trill
        assert trill.options.api_key == "sk-test"

    def test_options_and_keywords_conflict(self, fake_trill: str) -> None:
        with pytest.raises(TypeError):
            Trill(TrillOptions(), trill_path_override=fake_trill)

    def test_options_are_immutable(self) -> None:
        options = TrillOptions(api_key="a")
        with pytest.raises(AttributeError):
            options.api_key = "b"  # type: ignore[misc]

    def test_missing_executable_fails_early(self, tmp_path: Path) -> None:
        with pytest.raises(ExecutableNotFoundError):
            Trill(trill_path_override=str(tmp_path / "missing"))

    def test_invalid_config_fails_early(self, fake_trill: str) -> None:
        with pytest.raises(ConfigError):
            Trill(trill_path_override=fake_trill, config={"model": {"temperature": float("nan")}})

    def test_config_becomes_overrides(self, fake_trill: str) -> None:
        """Nested config yields --config model.temperature=0.2."""
        trill_exec = TrillExec(fake_trill, config={"model": {"temperature": 0.2}})
        assert trill_exec.config_overrides == ["model.temperature=0.2"]

    def test_custom_process_skips_resolution(self, tmp_path: Path) -> None:
        """A supplied process is used as-is; no executable lookup happens."""
        process = FakeAgentProcess()
        trill = Trill(TrillOptions(trill_path_override=str(tmp_path / "missing")), process=process)
        assert isinstance(trill.start_thread(), Thread)


class TestThreads:
    """Tests for start_thread and resume_thread."""

    def test_start_thread_has_no_id(self) -> None:
        trill = Trill(process=FakeAgentProcess())
        assert trill.start_thread().id is None
        assert trill.start_thread(ThreadOptions(model="m")).id is None

    def test_resume_thread_carries_id(self) -> None:
        trill = Trill(process=FakeAgentProcess())
        thread = trill.resume_thread("thread-42")
        assert thread.id == "thread-42"

    def test_thread_options_kept(self) -> None:
        options = ThreadOptions(model="gpt-5-codex", skip_git_repo_check=True)
        thread = Trill(process=FakeAgentProcess()).start_thread(options)
        assert thread.options is options

    def test_threads_are_independent(self) -> None:
        trill = Trill(process=FakeAgentProcess())
        assert trill.start_thread() is not trill.start_thread()


@pytest.mark.anyio
class TestEndToEnd:
    """Full turns through the real TrillExec and a stand-in executable."""

    async def test_structured_turn(self, fake_trill: str) -> None:
        schema = {"type": "object", "properties": {"summary": {"type": "string"}}}
        trill = Trill(
            trill_path_override=fake_trill, config={"model": {"temperature": 0.2}}
        )
        thread = trill.start_thread(ThreadOptions(skip_git_repo_check=True))

        turn = await thread.run("Summarize repository status", TurnOptions(output_schema=schema))

        report = json.loads(turn.final_response)
        assert thread.id == "thread-new"
        assert report["prompt"] == "Summarize repository status"
        assert report["schema"] == schema
        assert "model.temperature=0.2" in report["args"]
        assert "--skip-git-repo-check" in report["args"]
        assert turn.usage is not None and turn.usage.input_tokens == 3

    async def test_resumed_turn(self, fake_trill: str) -> None:
        trill = Trill(trill_path_override=fake_trill)
        thread = trill.resume_thread("thread-old")
        await thread.run("continue")

        assert thread.id == "thread-old"
