"""Unit tests for core.file_io -- atomic whole-file replace."""

from __future__ import annotations

from pathlib import Path

from bankroll_ledger.core.file_io import atomic_write_text


class TestAtomicWriteText:
    def test_writes_file(self, tmp_path: Path) -> None:
        path = tmp_path / "ledger.json"
        atomic_write_text(path, '{"bets": []}')
        assert path.read_text() == '{"bets": []}'

    def test_replaces_existing(self, tmp_path: Path) -> None:
        path = tmp_path / "ledger.json"
        atomic_write_text(path, "old")
        atomic_write_text(path, "new")
        assert path.read_text() == "new"

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        path = tmp_path / "a" / "b" / "ledger.json"
        atomic_write_text(path, "x")
        assert path.exists()

    def test_no_temp_file_left(self, tmp_path: Path) -> None:
        path = tmp_path / "ledger.json"
        atomic_write_text(path, "x")
        assert [p.name for p in tmp_path.iterdir()] == ["ledger.json"]
