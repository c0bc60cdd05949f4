"""Tests for granola_markdown.export_engine — run_export end to end."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from conftest import encode_cache
from granola_markdown.config import Config
from granola_markdown.errors import (
    CacheNotFoundError,
    CacheParseError,
    InvalidCacheFormat,
    NoteWriteError,
)
from granola_markdown.export_engine import run_export

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_config(tmp_path, cache_path, **kwargs) -> Config:
    return Config(output_dir=tmp_path / "meetings", cache_path=cache_path, **kwargs)


def _doc(doc_id: str, title: str, created_at: str, **extra) -> dict:
    return {"id": doc_id, "title": title, "created_at": created_at, "valid_meeting": True, **extra}


@pytest.fixture
def multi_cache(tmp_path):
    state = {
        "documents": {
            "a": _doc("a", "Alpha Review", "2024-03-09T09:00:00Z"),
            "b": _doc("b", "Beta Kickoff", "2024-02-01T09:00:00Z"),
            "c": _doc("c", "Deleted One", "2024-03-09T09:00:00Z", deleted_at="2024-03-09T10:00:00Z"),
            "d": _doc("d", "Not A Meeting", "2024-03-09T09:00:00Z", valid_meeting=False),
        },
    }
    path = tmp_path / "cache-v3.json"
    path.write_text(encode_cache(state), encoding="utf-8")
    return path


class TestRunExport:
    def test_team_sync_example(self, export_config):
        result = run_export(export_config, now=NOW)

        assert result.exported == 1
        assert result.skipped == 0
        assert result.exported_files == ["2024-03-01-team-sync.md"]
        content = (export_config.output_dir / "2024-03-01-team-sync.md").read_text(encoding="utf-8")
        assert content.startswith("# Team Sync\n")
        assert "## Attendees\n\n- Alice <a@x.com>\n\n---" in content
        assert "## Transcript\n\nBob: hello\nme: hi\n" in content
        assert "## Notes\n\n## Agenda\n- item\n\n---" in content

    def test_creates_output_dir(self, export_config):
        assert not export_config.output_dir.exists()
        run_export(export_config, now=NOW)
        assert export_config.output_dir.is_dir()

    def test_filters_invalid_and_deleted(self, tmp_path, multi_cache):
        cfg = make_config(tmp_path, multi_cache)
        result = run_export(cfg, now=NOW)
        assert result.total_documents == 4
        assert result.matched == 2
        assert sorted(result.exported_files) == [
            "2024-02-01-beta-kickoff.md",
            "2024-03-09-alpha-review.md",
        ]

    def test_days_window(self, tmp_path, multi_cache):
        cfg = make_config(tmp_path, multi_cache, days=7)
        result = run_export(cfg, now=NOW)
        assert result.exported_files == ["2024-03-09-alpha-review.md"]
        assert result.start_date == NOW - timedelta(days=7)
        assert result.end_date == NOW

    def test_no_matches_is_not_an_error(self, tmp_path, multi_cache):
        cfg = make_config(tmp_path, multi_cache, days=1)
        result = run_export(cfg, now=datetime(2030, 1, 1, tzinfo=timezone.utc))
        assert result.matched == 0
        assert result.exported == 0
        assert result.skipped == 0
        assert not cfg.output_dir.exists()

    def test_second_run_skips_everything(self, tmp_path, multi_cache):
        cfg = make_config(tmp_path, multi_cache)
        first = run_export(cfg, now=NOW)
        path = cfg.output_dir / "2024-03-09-alpha-review.md"
        path.write_text("hand edited")

        second = run_export(cfg, now=NOW)
        assert second.exported == 0
        assert second.skipped == first.exported
        assert sorted(second.skipped_files) == sorted(first.exported_files)
        assert path.read_text() == "hand edited"

    def test_force_rewrites(self, tmp_path, multi_cache):
        cfg = make_config(tmp_path, multi_cache)
        first = run_export(cfg, now=NOW)
        path = cfg.output_dir / "2024-03-09-alpha-review.md"
        path.write_text("hand edited")

        second = run_export(replace(cfg, force=True), now=NOW)
        assert second.exported == first.exported
        assert second.skipped == 0
        assert path.read_text().startswith("# Alpha Review\n")

    def test_skipped_documents_are_not_rendered(self, export_config):
        export_config.output_dir.mkdir()
        (export_config.output_dir / "2024-03-01-team-sync.md").write_text("x")
        with patch("granola_markdown.export_engine.render_meeting") as mock_render:
            result = run_export(export_config, now=NOW)
        mock_render.assert_not_called()
        assert result.skipped_files == ["2024-03-01-team-sync.md"]

    def test_dry_run_writes_nothing(self, export_config):
        result = run_export(replace(export_config, dry_run=True), now=NOW)
        assert result.dry_run is True
        assert result.exported == 1
        assert not export_config.output_dir.exists()

    def test_defaults_now_to_current_time(self, export_config):
        result = run_export(export_config)
        assert result.end_date is not None
        assert result.end_date.tzinfo is not None


class TestRunExportErrors:
    def test_missing_cache(self, tmp_path):
        cfg = make_config(tmp_path, tmp_path / "absent.json")
        with pytest.raises(CacheNotFoundError):
            run_export(cfg, now=NOW)
        assert not cfg.output_dir.exists()

    def test_missing_cache_property(self, tmp_path):
        cache = tmp_path / "cache.json"
        cache.write_text(json.dumps({"documents": {}}))
        with pytest.raises(InvalidCacheFormat):
            run_export(make_config(tmp_path, cache), now=NOW)

    def test_malformed_inner_json(self, tmp_path):
        cache = tmp_path / "cache.json"
        cache.write_text(json.dumps({"cache": "{oops"}))
        with pytest.raises(CacheParseError) as exc_info:
            run_export(make_config(tmp_path, cache), now=NOW)
        assert exc_info.value.stage == "inner"

    def test_write_failure_aborts_run(self, tmp_path, multi_cache):
        cfg = make_config(tmp_path, multi_cache)
        with patch(
            "granola_markdown.note_writer.Path.write_text",
            side_effect=PermissionError("denied"),
        ):
            with pytest.raises(NoteWriteError):
                run_export(cfg, now=NOW)

    def test_output_dir_blocked_by_file(self, tmp_path, multi_cache):
        blocker = tmp_path / "meetings"
        blocker.write_text("not a directory")
        cfg = make_config(tmp_path, multi_cache)
        with pytest.raises(NoteWriteError):
            run_export(cfg, now=NOW)
