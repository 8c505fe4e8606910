"""End-to-end CLI flow against a JSON ledger file."""

from __future__ import annotations

import json
import re

import pytest
from click.testing import CliRunner

from bankroll_ledger.cli import main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner(env={"BANKROLL_OBSERVABILITY__LOG_LEVEL": "WARNING"})


@pytest.fixture
def ledger_path(tmp_path):
    return tmp_path / "ledger.json"


def _invoke(runner, ledger_path, *args):
    return runner.invoke(main, ["--ledger", str(ledger_path), *args])


def _add(runner, ledger_path, stake="1", odd="2.0") -> str:
    result = _invoke(
        runner, ledger_path, "add-wager",
        "--market", "League of Legends", "--league", "LCK",
        "--details", "T1 vs Gen.G", "--stake", stake, "--odd", odd,
    )
    assert result.exit_code == 0, result.output
    return re.search(r"Added (\S+)", result.output).group(1)


class TestCliFlow:
    def test_add_settle_summary(self, runner, ledger_path):
        wager_id = _add(runner, ledger_path)
        assert ledger_path.exists()

        result = _invoke(runner, ledger_path, "settle", wager_id, "won")
        assert result.exit_code == 0, result.output
        assert "won" in result.output

        result = _invoke(runner, ledger_path, "summary")
        assert result.exit_code == 0, result.output
        assert "101.00" in result.output
        assert "Stake ladder" in result.output

    def test_withdraw_and_history(self, runner, ledger_path):
        result = _invoke(runner, ledger_path, "withdraw", "25")
        assert result.exit_code == 0, result.output
        assert "75.00" in result.output

        result = _invoke(runner, ledger_path, "history")
        assert result.exit_code == 0, result.output
        assert "withdrawal 25.00" in result.output

    def test_settle_unknown_wager(self, runner, ledger_path):
        result = _invoke(runner, ledger_path, "settle", "missing", "lost")
        assert result.exit_code != 0
        assert "missing" in result.output

    def test_settle_twice(self, runner, ledger_path):
        wager_id = _add(runner, ledger_path)
        _invoke(runner, ledger_path, "settle", wager_id, "lost")
        result = _invoke(runner, ledger_path, "settle", wager_id, "won")
        assert result.exit_code != 0
        assert "already lost" in result.output

    def test_export_then_import(self, runner, ledger_path, tmp_path):
        wager_id = _add(runner, ledger_path, stake="5", odd="1.5")
        export_path = tmp_path / "backup.json"
        result = _invoke(runner, ledger_path, "export", str(export_path))
        assert result.exit_code == 0, result.output
        assert json.loads(export_path.read_text())["bets"][0]["id"] == wager_id

        other = tmp_path / "other.json"
        result = _invoke(runner, other, "import", str(export_path))
        assert result.exit_code == 0, result.output
        assert "Imported 1 wagers" in result.output
        assert json.loads(other.read_text())["bets"][0]["id"] == wager_id

    def test_export_csv(self, runner, ledger_path, tmp_path):
        _add(runner, ledger_path)
        csv_path = tmp_path / "wagers.csv"
        result = _invoke(runner, ledger_path, "export", str(csv_path))
        assert result.exit_code == 0, result.output
        assert csv_path.read_text().startswith("id,date,market")

    def test_import_invalid_file(self, runner, ledger_path, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"bets": []}')
        result = _invoke(runner, ledger_path, "import", str(bad))
        assert result.exit_code != 0
        assert "Import failed" in result.output

    def test_rollups_run(self, runner, ledger_path):
        wager_id = _add(runner, ledger_path)
        _invoke(runner, ledger_path, "settle", wager_id, "won")
        for command in ("performance", "calendar"):
            result = _invoke(runner, ledger_path, command)
            assert result.exit_code == 0, result.output

    def test_bad_config_file(self, runner, ledger_path, tmp_path):
        config = tmp_path / "bankroll.toml"
        config.write_text("unit_percentage = 5\n")
        result = runner.invoke(main, ["--config", str(config), "summary"])
        assert result.exit_code != 0
