"""Tests for the pure CLI commands."""

from click.testing import CliRunner

from server.cli import cli


def test_level_command():
    result = CliRunner().invoke(cli, ["level", "250"])
    assert result.exit_code == 0
    assert "Level 3 (50/100 to next)" in result.output


def test_level_rejects_negative():
    result = CliRunner().invoke(cli, ["level", "--", "-5"])
    assert result.exit_code != 0


def test_preview_command():
    result = CliRunner().invoke(cli, ["preview", "14", "8"])
    assert result.exit_code == 0
    assert "Health: 28  Mana: 6" in result.output


def test_preview_rejects_out_of_range():
    result = CliRunner().invoke(cli, ["preview", "25", "10"])
    assert result.exit_code != 0


def test_classes_command():
    result = CliRunner().invoke(cli, ["classes"])
    assert result.exit_code == 0
    for name in ("Ocultista", "Especialista", "Combatente"):
        assert name in result.output
