"""
Tests for the command line interface.
"""

import pytest
from typer.testing import CliRunner

from wildframe import __version__, cli
from wildframe.config import config
from wildframe.errors import QuotaExceeded, TransportFailure
from wildframe.pipeline import GenerationOrchestrator

runner = CliRunner()


@pytest.fixture
def credentials(monkeypatch):
    monkeypatch.setattr(config, "gemini_api_key", "test-key")
    monkeypatch.setattr(config, "use_vertexai", False)


@pytest.fixture
def cli_orchestrator(monkeypatch, sequence_agent, image_generator, image_reviser, pacing_sleep):
    orchestrator = GenerationOrchestrator(
        sequence_agent=sequence_agent,
        image_generator=image_generator,
        image_reviser=image_reviser,
        pacing_delay=0,
        on_change=cli._print_progress,
        sleep=pacing_sleep,
    )
    monkeypatch.setattr(cli, "_build_orchestrator", lambda: orchestrator)
    return orchestrator


class TestInfoCommands:
    """Tests for commands that never call the API."""

    def test_version(self):
        result = runner.invoke(cli.app, ["--version"])

        assert result.exit_code == 0
        assert f"wildframe version {__version__}" in result.output

    def test_options(self):
        result = runner.invoke(cli.app, ["options"])

        assert result.exit_code == 0
        assert "14_seconds" in result.output
        assert "Setup/Tension -> Confrontation/Action -> Resolution/Outcome" in result.output
        assert "9:16 (Vertical)" in result.output

    def test_guide(self):
        result = runner.invoke(cli.app, ["guide"])

        assert result.exit_code == 0
        assert "Step 5: Color grading" in result.output

    def test_lucky(self):
        result = runner.invoke(cli.app, ["lucky"])

        assert result.exit_code == 0
        assert "Feeling lucky" in result.output
        assert "wildframe generate" in result.output


class TestGenerate:
    """Tests for the generate command."""

    def test_invalid_duration(self, credentials, cli_orchestrator, image_generator):
        result = runner.invoke(cli.app, ["generate", "-d", "30_seconds"])

        assert result.exit_code == 2
        assert image_generator.calls == []

    def test_missing_credentials(self, monkeypatch, cli_orchestrator, image_generator):
        monkeypatch.setattr(config, "gemini_api_key", "")
        monkeypatch.setattr(config, "use_vertexai", False)

        result = runner.invoke(cli.app, ["generate", "--no-revise"])

        assert result.exit_code == 1
        assert "Configuration error" in result.output
        assert image_generator.calls == []

    def test_full_run(self, credentials, cli_orchestrator, image_generator):
        result = runner.invoke(
            cli.app, ["generate", "A leopard stalks an impala", "-d", "21_seconds", "--no-revise"]
        )

        assert result.exit_code == 0, result.output
        assert image_generator.calls == [1, 2, 3]
        assert "Scene 3: keyframe ready" in result.output
        assert "Scene 1 of 3: Beat 1" in result.output
        assert "characterDNA" in result.output
        assert "Sequence complete" in result.output
        assert cli_orchestrator.state.user_input.scenario == "A leopard stalks an impala"

    def test_lucky_flag(self, credentials, cli_orchestrator, sequence_agent):
        result = runner.invoke(cli.app, ["generate", "--lucky", "--no-revise"])

        assert result.exit_code == 0, result.output
        assert sequence_agent.run.await_args.args[0].reference_video is None

    def test_lucky_rejects_scenario(self, credentials, cli_orchestrator, sequence_agent):
        result = runner.invoke(cli.app, ["generate", "A leopard stalks an impala", "--lucky"])

        assert result.exit_code == 2
        sequence_agent.run.assert_not_called()

    def test_lucky_rejects_reference_video(self, credentials, cli_orchestrator, sequence_agent, tmp_path):
        video = tmp_path / "hunt.mp4"
        video.write_bytes(b"\x00\x00\x00\x18ftypmp42")

        result = runner.invoke(cli.app, ["generate", "--lucky", "-r", str(video)])

        assert result.exit_code == 2
        sequence_agent.run.assert_not_called()

    def test_sequence_failure_exits(self, credentials, cli_orchestrator, sequence_agent, image_generator):
        sequence_agent.run.side_effect = TransportFailure("Gemini API Error: 503 UNAVAILABLE")

        result = runner.invoke(cli.app, ["generate", "--no-revise"])

        assert result.exit_code == 1
        assert "Error: Gemini API Error: 503 UNAVAILABLE" in result.output
        assert image_generator.calls == []

    def test_quota_stops_run(self, credentials, cli_orchestrator, image_generator):
        image_generator.failures[1] = QuotaExceeded("API Quota Exceeded: 429")

        result = runner.invoke(cli.app, ["generate", "--no-revise"])

        assert result.exit_code == 1
        assert image_generator.calls == [1]
        assert "Image generation stopped: API Quota Exceeded: 429" in result.output
        assert "Generation cancelled due to API quota error." in result.output

    def test_failed_keyframe_is_reported(self, credentials, cli_orchestrator, image_generator):
        image_generator.failures[2] = TransportFailure("Image generation failed: blocked")

        result = runner.invoke(cli.app, ["generate", "--no-revise"])

        assert result.exit_code == 0, result.output
        assert "1 keyframe(s) failed: scene 2" in result.output

    def test_revision_loop(self, credentials, cli_orchestrator, image_reviser):
        result = runner.invoke(cli.app, ["generate"], input="1\nadd clouds\n\n")

        assert result.exit_code == 0, result.output
        assert [call[2] for call in image_reviser.calls] == ["add clouds"]
        assert "Scene 1: keyframe revised" in result.output

    def test_export_then_show(self, credentials, cli_orchestrator, tmp_path):
        out = tmp_path / "out"

        result = runner.invoke(cli.app, ["generate", "--no-revise", "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert (out / "sequence.yaml").exists()
        assert (out / "scene_1.png").exists()

        shown = runner.invoke(cli.app, ["show", str(out / "sequence.yaml")])

        assert shown.exit_code == 0, shown.output
        assert "Scenes: 3" in shown.output
        assert "Scene 2: Beat 2" in shown.output
