"""Unit tests for the maintenance CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from newsletter_store import cli
from newsletter_store.cli import app
from newsletter_store.domain.value_objects import EntryCategory


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner."""
    return CliRunner()


@pytest.fixture
def snapshot_path(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the CLI at an emulator snapshot in the temporary directory."""
    path = temp_dir / "newsletter.seed.json"
    monkeypatch.setenv("NEWSLETTER_STORE_USE_IN_MEMORY_DB", "1")
    monkeypatch.setenv("NEWSLETTER_STORE_STORAGE__SNAPSHOT_PATH", str(path))
    monkeypatch.setenv("COLUMNS", "200")
    return path


@pytest.mark.unit
class TestCli:
    """Tests for the CLI commands."""

    def test_init_db(self, runner: CliRunner, snapshot_path: Path) -> None:
        """Test init-db reports the selected engine."""
        result = runner.invoke(app, ["init-db"])

        assert result.exit_code == 0
        assert "Schema ready on the emulated engine" in result.output

    def test_seed_writes_sample_issue(self, runner: CliRunner, snapshot_path: Path) -> None:
        """Test seed stores the sample entries and a welcome comment."""
        result = runner.invoke(app, ["seed"])

        assert result.exit_code == 0
        assert "Seeded January 2026 (newsletter 1, 3 entries)" in result.output

        document = json.loads(snapshot_path.read_text(encoding="utf-8"))
        assert [e["name"] for e in document["newsletter_entries"]] == [
            "Alice Example",
            "Bob Example",
            "Chris Example",
        ]
        assert document["entry_comments"][0]["content"] == "Welcome to the team, Alice!"

    def test_seed_twice_replaces_entries(self, runner: CliRunner, snapshot_path: Path) -> None:
        """Test seeding again keeps one copy of the sample entries."""
        runner.invoke(app, ["seed"])
        result = runner.invoke(app, ["seed"])

        assert result.exit_code == 0
        document = json.loads(snapshot_path.read_text(encoding="utf-8"))
        assert len(document["newsletters"]) == 1
        assert len(document["newsletter_entries"]) == 3
        assert document["_entryId"] == 7

    def test_show(self, runner: CliRunner, snapshot_path: Path) -> None:
        """Test show prints the seeded issue."""
        runner.invoke(app, ["seed"])

        result = runner.invoke(app, ["show", "January", "2026"])

        assert result.exit_code == 0
        assert "Alice Example" in result.output
        assert "newHires" in result.output

    def test_show_empty_issue(self, runner: CliRunner, snapshot_path: Path) -> None:
        """Test show on an issue without entries."""
        result = runner.invoke(app, ["show", "May", "2030"])

        assert result.exit_code == 0
        assert "No entries for May 2030" in result.output

    def test_production_failure_exits(
        self, runner: CliRunner, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test an unusable SQLite path in production exits with status 1."""
        blocker = temp_dir / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        monkeypatch.setenv("NEWSLETTER_STORE_ENVIRONMENT", "production")
        monkeypatch.setenv("NEWSLETTER_STORE_STORAGE__DATABASE_PATH", str(blocker / "newsletter.db"))
        monkeypatch.setenv("COLUMNS", "200")

        result = runner.invoke(app, ["init-db"])

        assert result.exit_code == 1
        assert "Could not initialize SQLite" in result.output

    def test_seed_without_new_hire(
        self, runner: CliRunner, snapshot_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test seed succeeds without a welcome comment when no entry is a new hire."""
        drafts = tuple(d for d in cli.SAMPLE_DRAFTS if d.category is not EntryCategory.NEW_HIRES)
        monkeypatch.setattr(cli, "SAMPLE_DRAFTS", drafts)

        result = runner.invoke(app, ["seed"])

        assert result.exit_code == 0
        assert f"{len(drafts)} entries" in result.output
        document = json.loads(snapshot_path.read_text(encoding="utf-8"))
        assert len(document["newsletter_entries"]) == len(drafts)
        assert document["entry_comments"] == []
