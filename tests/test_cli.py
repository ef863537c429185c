"""Tests for the command line interface."""

from pathlib import Path

from typer.testing import CliRunner

from commander_table.cli import app

CONFIG_DECK = Path(__file__).resolve().parent.parent / "config" / "decks" / "atraxa.yaml"

runner = CliRunner()


class TestValidate:
    def test_bundled_deck_is_valid(self):
        result = runner.invoke(app, ["validate", str(CONFIG_DECK)])
        assert result.exit_code == 0
        assert "valid" in result.output

    def test_duplicate_reported(self, tmp_path):
        path = tmp_path / "dupes.txt"
        path.write_text("// Commander\n1 Atraxa, Praetors' Voice\n2 Sol Ring\n97 Forest\n", encoding="utf-8")
        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Duplicate non-basic card: Sol Ring" in result.output

    def test_short_deck_cannot_load(self, tmp_path):
        path = tmp_path / "short.txt"
        path.write_text("// Commander\n1 Atraxa, Praetors' Voice\n10 Forest\n", encoding="utf-8")
        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 2


class TestDemo:
    def test_demo_runs(self):
        result = runner.invoke(app, ["demo", "--deck", str(CONFIG_DECK), "--players", "2", "--seed", "3"])
        assert result.exit_code == 0
        assert "Player 1" in result.output
        assert "Turn 2" in result.output
