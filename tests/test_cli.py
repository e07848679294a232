"""Tests for the command-line interface."""

import json

import pytest

from main import main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("MEMORY_FILE_PATH", "HOST", "PORT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestCli:
    """Tests for CLI commands."""

    def test_extract_prints_spans(self, tmp_path, capsys):
        path = tmp_path / "memory.json"

        main(["-m", str(path), "extract", "I visited Paris, France and also Lake Tahoe."])
        out = capsys.readouterr().out

        assert "city" in out and "Paris, France" in out
        assert "landmark" in out and "Lake Tahoe" in out
        assert not path.exists()

    def test_extract_with_source_records(self, tmp_path, capsys):
        path = tmp_path / "memory.json"

        main(["-m", str(path), "extract", "Austin, TX", "--source", "Trip"])
        created = json.loads(capsys.readouterr().out)

        assert [e["name"] for e in created["entities"]] == ["Austin, TX", "TX"]
        assert path.exists()

    def test_stats_and_search(self, tmp_path, capsys):
        path = tmp_path / "memory.json"
        main(["-m", str(path), "extract", "Austin, TX", "--source", "Trip"])
        capsys.readouterr()

        main(["-m", str(path), "stats"])
        stats = capsys.readouterr().out
        main(["-m", str(path), "search", "tx"])
        found = json.loads(capsys.readouterr().out)

        assert "Total entities: 2" in stats
        assert "located_in: 1" in stats
        assert [e["name"] for e in found["entities"]] == ["Austin, TX", "TX"]

    def test_error_exits_with_status_1(self, tmp_path, capsys):
        path = tmp_path / "memory.json"
        path.write_text("not json", encoding="utf-8")

        with pytest.raises(SystemExit) as exc_info:
            main(["-m", str(path), "stats"])

        assert exc_info.value.code == 1
        assert capsys.readouterr().err.startswith("Error:")
