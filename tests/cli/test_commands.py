"""Tests for the steward CLI commands."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from cli.config_models import StewardConfig
from cli.main import cli


@pytest.fixture
def config(tmp_path):
    return StewardConfig.from_dict({"paths": {"data_dir": str(tmp_path / "data")}})


@pytest.fixture
def runner(config):
    with patch("cli.config.load_config_model", return_value=config):
        yield CliRunner()


@pytest.fixture
def batch_file(tmp_path, sample_extraction):
    path = tmp_path / "batch.json"
    path.write_text("```json\n" + json.dumps(sample_extraction) + "\n```")
    return path


def _components():
    from cli.utils import get_components

    return get_components()


class TestValidate:
    def test_valid_batch(self, runner, batch_file):
        result = runner.invoke(cli, ["validate", str(batch_file)])
        assert result.exit_code == 0, result.output
        assert "Call mom" in result.output
        assert "Dune" in result.output

    def test_invalid_item_exits_nonzero(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"todos": [{"priority": "high"}]}))
        result = runner.invoke(cli, ["validate", str(path)])
        assert result.exit_code == 1
        assert "No valid candidates" in result.output

    def test_collection_not_a_list(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"todos": "call mom", "mood": "good"}))
        result = runner.invoke(cli, ["validate", str(path)])
        assert result.exit_code == 1
        assert "todos must be a list" in result.output
        assert "good" in result.output

    def test_empty_stdin(self, runner):
        result = runner.invoke(cli, ["validate", "-"], input="")
        assert result.exit_code != 0
        assert "No input" in result.output


class TestCommit:
    def test_commit_saves_confident_items(self, runner, batch_file):
        result = runner.invoke(cli, ["commit", str(batch_file)])
        assert result.exit_code == 0, result.output
        assert "Saved 4 item(s) at threshold 0.70" in result.output
        assert "Call mom" in result.output
        assert "confidence < threshold" in result.output

        c = _components()
        assert c["records"].count(c["user_id"], "todo") == 1

    def test_threshold_override(self, runner, batch_file):
        result = runner.invoke(cli, ["commit", str(batch_file), "-t", "0.2"])
        assert result.exit_code == 0, result.output
        assert "Saved 5 item(s) at threshold 0.20" in result.output

    def test_unknown_journal(self, runner, batch_file):
        result = runner.invoke(cli, ["commit", str(batch_file), "-j", "nope"])
        assert result.exit_code != 0
        assert "Journal entry not found" in result.output

    def test_with_journal(self, runner, batch_file):
        c = _components()
        entry = c["journal"].create(c["user_id"], "Tired but got through it.", energy="low")

        result = runner.invoke(cli, ["commit", str(batch_file), "-j", entry.id])
        assert result.exit_code == 0, result.output

        moods = c["records"].find(c["user_id"], "mood")
        assert moods[0].get("energy") == "low"
        assert moods[0].get("journal_id") == entry.id


class TestPrefs:
    def test_show(self, runner):
        result = runner.invoke(cli, ["prefs", "show"])
        assert result.exit_code == 0, result.output
        assert "0.70" in result.output

    def test_set_and_reset(self, runner):
        result = runner.invoke(cli, ["prefs", "set", "--threshold", "0.85", "--style", "actionable"])
        assert result.exit_code == 0, result.output
        c = _components()
        assert c["engine"].current_threshold(c["user_id"]) == 0.85

        result = runner.invoke(cli, ["prefs", "reset", "-y"])
        assert result.exit_code == 0
        assert c["engine"].current_threshold(c["user_id"]) == 0.7

    def test_set_nothing(self, runner):
        result = runner.invoke(cli, ["prefs", "set"])
        assert result.exit_code == 2

    def test_set_out_of_bounds(self, runner):
        result = runner.invoke(cli, ["prefs", "set", "--min", "0.9", "--max", "0.4"])
        assert result.exit_code == 1
        assert "cannot exceed" in result.output

    def test_stats_and_export(self, runner):
        runner.invoke(cli, ["feedback", "todo", "accepted", "-c", "0.9"])
        result = runner.invoke(cli, ["prefs", "stats"])
        assert result.exit_code == 0, result.output
        assert "todo" in result.output

        result = runner.invoke(cli, ["prefs", "export"])
        assert result.exit_code == 0
        assert "exported_at" in result.output


class TestFeedback:
    def test_threshold_moves_after_enough_feedback(self, runner):
        for _ in range(9):
            result = runner.invoke(cli, ["feedback", "todo", "accepted"])
            assert "Threshold adjusted" not in result.output
        result = runner.invoke(cli, ["feedback", "todo", "accepted"])
        assert result.exit_code == 0, result.output
        assert "0.70 -> 0.65" in result.output

    def test_rejects_unknown_type(self, runner):
        result = runner.invoke(cli, ["feedback", "recipe", "accepted"])
        assert result.exit_code == 2


class TestJournalAndContext:
    def test_add_and_list(self, runner):
        result = runner.invoke(
            cli, ["journal", "add", "--title", "Good run", "--tags", "health", "Great productive morning"]
        )
        assert result.exit_code == 0, result.output
        assert "Positive" in result.output

        result = runner.invoke(cli, ["journal", "list"])
        assert "Good run" in result.output

    def test_list_empty(self, runner):
        result = runner.invoke(cli, ["journal", "list"])
        assert "No entries found" in result.output

    def test_context(self, runner, batch_file):
        runner.invoke(cli, ["commit", str(batch_file)])
        result = runner.invoke(cli, ["context"])
        assert result.exit_code == 0, result.output
        assert "Running" in result.output
        assert "Call mom" in result.output

    def test_context_lite(self, runner):
        result = runner.invoke(cli, ["context", "--lite"])
        assert result.exit_code == 0, result.output
        assert "active_todo_count" in result.output

    def test_bad_config(self):
        with patch("cli.config.load_config_model", side_effect=ValueError("Invalid YAML")):
            result = CliRunner().invoke(cli, ["prefs", "show"])
        assert result.exit_code == 1
        assert "Invalid YAML" in result.output
