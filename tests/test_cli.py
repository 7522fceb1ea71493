"""
Tests for the command-line interface in mock mode.
"""

import json

import pendulum
import pytest
from typer.testing import CliRunner

from slotplanner import __version__
from slotplanner.cli.app import _start_date, app
from slotplanner.config import AppConfig

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        f"expert_id: expert-1\nmock_data_file: {tmp_path / 'store.json'}\n",
        encoding="utf-8",
    )
    return path


def _invoke(config_file, *args):
    return runner.invoke(app, [*args, "--config", str(config_file), "--mock"])


class TestAvailabilityCommands:
    """Tests for the schedule editing commands."""

    def test_show(self, config_file):
        result = _invoke(config_file, "show")

        assert result.exit_code == 0
        assert "Monday" in result.output
        assert "Unavailable" in result.output

    def test_add_slot_is_persisted(self, config_file, tmp_path):
        result = _invoke(config_file, "add-slot", "tue")

        assert result.exit_code == 0
        assert "Slot added on Tuesday" in result.output
        stored = json.loads((tmp_path / "store.json").read_text(encoding="utf-8"))
        assert stored["availability"]["weekly"]["tue"] == [{"from": "09:00", "to": "09:30"}]

    def test_invalid_day_key(self, config_file):
        result = _invoke(config_file, "add-slot", "funday")
        assert result.exit_code != 0

    def test_rejected_command_exits_with_error(self, config_file):
        result = _invoke(config_file, "set-duration", "45")

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_bad_index(self, config_file):
        result = _invoke(config_file, "remove-slot", "tue", "3")

        assert result.exit_code == 1
        assert "out of range" in result.output

    def test_block_and_unblock_date(self, config_file):
        blocked = _invoke(config_file, "block-date", "2030-01-01")
        assert blocked.exit_code == 0
        assert "Blocked dates" in blocked.output

        duplicate = _invoke(config_file, "block-date", "2030-01-01")
        assert duplicate.exit_code == 1
        assert "Date already blocked" in duplicate.output

        removed = _invoke(config_file, "unblock-date", "0")
        assert removed.exit_code == 0

    def test_copy_day_with_confirmation_skipped(self, config_file, tmp_path):
        result = _invoke(config_file, "copy-day", "wed", "--yes")

        assert result.exit_code == 0
        stored = json.loads((tmp_path / "store.json").read_text(encoding="utf-8"))
        assert all(slots == [{"from": "10:00", "to": "10:30"}] for slots in stored["availability"]["weekly"].values())

    def test_copy_day_declined(self, config_file, tmp_path):
        result = runner.invoke(app, ["copy-day", "wed", "--config", str(config_file), "--mock"], input="n\n")

        assert result.exit_code == 0
        assert not (tmp_path / "store.json").exists()


class TestSessionCommands:
    """Tests for listing, joining and reviewing sessions."""

    def test_sessions(self, config_file):
        result = _invoke(config_file, "sessions")

        assert result.exit_code == 0
        assert "SES-1001" in result.output

    def test_sessions_search_without_match(self, config_file):
        result = _invoke(config_file, "sessions", "--search", "nobody")
        assert "No sessions found" in result.output

    def test_join_open_session(self, config_file):
        result = _invoke(config_file, "join", "SES-1002")

        assert result.exit_code == 0
        assert "mock-SES-1002" in result.output

    def test_join_future_session(self, config_file):
        result = _invoke(config_file, "join", "SES-1003")

        assert result.exit_code == 1
        assert "opens for joining" in result.output

    def test_unknown_session(self, config_file):
        result = _invoke(config_file, "join", "SES-9999")
        assert result.exit_code == 1

    def test_review_ended_session_once(self, config_file):
        first = _invoke(config_file, "review", "SES-1001", "--overall", "4", "--strengths", "clarity")
        assert first.exit_code == 0
        assert "Review submitted" in first.output

        second = _invoke(config_file, "review", "SES-1001", "--overall", "5")
        assert second.exit_code == 1
        assert "already submitted" in second.output

    def test_review_rating_out_of_range(self, config_file):
        result = _invoke(config_file, "review", "SES-1001", "--overall", "9")
        assert result.exit_code == 1


def test_slots(config_file):
    result = _invoke(config_file, "slots", "2030-01-07", "--days", "7")

    assert result.exit_code == 0
    assert "Monday, 07.01.2030" in result.output


def test_version():
    result = runner.invoke(app, ["version"])
    assert __version__ in result.output


def test_default_start_date_uses_configured_zone():
    """Without a date argument, "today" is taken in the configured zone."""
    config = AppConfig(timezone="Pacific/Kiritimati")

    assert _start_date(None, config) == pendulum.now("Pacific/Kiritimati").date()
    assert _start_date("2030-01-07", config) == pendulum.date(2030, 1, 7)
