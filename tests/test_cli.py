"""
Test suite for the model-state CLI commands.

Every test points the CLI at a temporary state file with --state-file.
"""

import json
import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from model_state.cli import main as cli_main
from model_state.cli.main import cli
from model_state.core.settings import Settings
from model_state.core.models import ModelRef
from model_state.storage.store import load_state


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def state_file(tmp_path: Path) -> Path:
    return tmp_path / "opencode" / "model.json"


def invoke(runner, state_file, *args):
    return runner.invoke(cli, ["--state-file", str(state_file), *args], obj={})


class TestPathCommand:
    """Test the path command."""

    def test_prints_override(self, runner, state_file):
        result = invoke(runner, state_file, "path")
        assert result.exit_code == 0
        assert result.output.strip() == str(state_file)


class TestUseCommand:
    """Test recording used models."""

    def test_records_and_persists(self, runner, state_file):
        for model in ("openrouter/gpt-5", "anthropic/claude", "openrouter/gpt-5"):
            result = invoke(runner, state_file, "use", model)
            assert result.exit_code == 0, result.output

        state = load_state(state_file)
        assert state.recent == [
            ModelRef(provider_id="openrouter", model_id="gpt-5"),
            ModelRef(provider_id="anthropic", model_id="claude"),
        ]

    def test_rejects_bad_model(self, runner, state_file):
        result = invoke(runner, state_file, "use", "gpt-5")
        assert result.exit_code == 2
        assert "provider/model" in result.output
        assert not state_file.exists()

    def test_corrupt_file_is_reported_and_kept(self, runner, state_file):
        state_file.parent.mkdir(parents=True)
        state_file.write_text("{broken")

        result = invoke(runner, state_file, "use", "openrouter/gpt-5")

        assert result.exit_code == 1
        assert state_file.read_text() == "{broken"


class TestFavoriteCommand:
    """Test favorite toggling."""

    def test_toggle(self, runner, state_file):
        result = invoke(runner, state_file, "favorite", "anthropic/claude")
        assert result.exit_code == 0
        assert "Added" in result.output
        assert load_state(state_file).favorite == [ModelRef(provider_id="anthropic", model_id="claude")]

        result = invoke(runner, state_file, "favorite", "anthropic/claude")
        assert result.exit_code == 0
        assert "Removed" in result.output
        assert load_state(state_file).favorite == []


class TestVariantCommand:
    """Test setting, showing and clearing variants."""

    def test_set_show_clear(self, runner, state_file):
        result = invoke(runner, state_file, "variant", "openrouter/gpt-5", "high")
        assert result.exit_code == 0
        assert load_state(state_file).variant == {"openrouter/gpt-5": "high"}

        result = invoke(runner, state_file, "variant", "openrouter/gpt-5")
        assert result.exit_code == 0
        assert result.output.strip() == "high"

        result = invoke(runner, state_file, "variant", "openrouter/gpt-5", "--clear")
        assert result.exit_code == 0
        assert load_state(state_file).variant == {}

    def test_show_unset_does_not_write(self, runner, state_file):
        result = invoke(runner, state_file, "variant", "openrouter/gpt-5")
        assert result.exit_code == 0
        assert "No variant" in result.output
        assert not state_file.exists()

    def test_name_and_clear_conflict(self, runner, state_file):
        result = invoke(runner, state_file, "variant", "openrouter/gpt-5", "high", "--clear")
        assert result.exit_code == 2


class TestShowCommand:
    """Test the read-only inspection command."""

    def test_empty(self, runner, state_file):
        result = invoke(runner, state_file, "show")
        assert result.exit_code == 0
        assert "No model preferences" in result.output
        assert not state_file.exists()

    def test_json_matches_file_format(self, runner, state_file):
        invoke(runner, state_file, "use", "openrouter/gpt-5")
        invoke(runner, state_file, "variant", "openrouter/gpt-5", "high")

        result = invoke(runner, state_file, "show", "--format", "json")
        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "recent": [{"providerID": "openrouter", "modelID": "gpt-5"}],
            "favorite": [],
            "variant": {"openrouter/gpt-5": "high"},
        }

    def test_text_tables(self, runner, state_file):
        invoke(runner, state_file, "use", "openrouter/gpt-5")
        invoke(runner, state_file, "favorite", "anthropic/claude")
        before = state_file.read_bytes()

        result = invoke(runner, state_file, "show", "--format", "text")
        assert result.exit_code == 0
        assert "Recent" in result.output
        assert "Favorites" in result.output
        assert "gpt-5" in result.output
        assert "claude" in result.output
        assert state_file.read_bytes() == before

    def test_corrupt_file(self, runner, state_file):
        state_file.parent.mkdir(parents=True)
        state_file.write_text("[]")
        result = invoke(runner, state_file, "show")
        assert result.exit_code == 1


class TestCycleFavoriteCommand:
    """Test cycling through favorites."""

    def test_cycles_and_records(self, runner, state_file):
        invoke(runner, state_file, "favorite", "openrouter/gpt-5")
        invoke(runner, state_file, "favorite", "anthropic/claude")

        result = invoke(runner, state_file, "cycle-favorite")
        assert result.exit_code == 0
        assert load_state(state_file).recent[0] == ModelRef(provider_id="openrouter", model_id="gpt-5")

        result = invoke(runner, state_file, "cycle-favorite")
        assert result.exit_code == 0
        assert load_state(state_file).recent[0] == ModelRef(provider_id="anthropic", model_id="claude")

    def test_reverse(self, runner, state_file):
        invoke(runner, state_file, "favorite", "openrouter/gpt-5")
        invoke(runner, state_file, "favorite", "anthropic/claude")

        result = invoke(runner, state_file, "cycle-favorite", "--reverse")
        assert result.exit_code == 0
        assert load_state(state_file).recent[0] == ModelRef(provider_id="anthropic", model_id="claude")

    def test_no_favorites(self, runner, state_file):
        result = invoke(runner, state_file, "cycle-favorite")
        assert result.exit_code == 0
        assert "No favorite" in result.output
        assert not state_file.exists()


class TestLoggingSetup:
    """Test that the CLI log level follows settings."""

    @pytest.fixture(autouse=True)
    def restore_root_level(self):
        root = logging.getLogger()
        level = root.level
        yield
        root.setLevel(level)

    def test_log_level_from_settings(self, runner, state_file, monkeypatch):
        monkeypatch.setattr(cli_main, "get_settings", lambda: Settings(log_level="DEBUG"))
        result = invoke(runner, state_file, "path")
        assert result.exit_code == 0
        assert logging.getLogger().level == logging.DEBUG

    def test_default_is_warning(self, runner, state_file, monkeypatch):
        monkeypatch.setattr(cli_main, "get_settings", lambda: Settings(log_level="WARNING"))
        invoke(runner, state_file, "path")
        assert logging.getLogger().level == logging.WARNING

    def test_verbose_lowers_to_info(self, runner, state_file, monkeypatch):
        monkeypatch.setattr(cli_main, "get_settings", lambda: Settings(log_level="ERROR"))
        runner.invoke(cli, ["--state-file", str(state_file), "--verbose", "path"], obj={})
        assert logging.getLogger().level == logging.INFO

    def test_verbose_keeps_lower_level(self, runner, state_file, monkeypatch):
        monkeypatch.setattr(cli_main, "get_settings", lambda: Settings(log_level="DEBUG"))
        runner.invoke(cli, ["--state-file", str(state_file), "--verbose", "path"], obj={})
        assert logging.getLogger().level == logging.DEBUG
