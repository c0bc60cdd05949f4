"""Orchestrator: load cache -> filter -> join -> render -> write."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from .cache_parser import parse_cache
from .config import Config
from .date_filter import compute_start_date, filter_documents
from .errors import NoteWriteError
from .joiner import join_meeting
from .models import ExportResult
from .note_writer import make_filename, render_meeting, write_note

log = logging.getLogger(__name__)


def run_export(config: Config, *, now: datetime | None = None) -> ExportResult:
    """Run a single export pass over the cache.

    Any load, parse or write failure propagates; there is no partial resume.
    """
    # Captured once so every document is filtered against the same instant
    now = now or datetime.now(tz=timezone.utc)
    start_date = compute_start_date(now, config.days)
    result = ExportResult(
        output_dir=config.output_dir,
        start_date=start_date,
        end_date=now,
        dry_run=config.dry_run,
    )

    log.debug("Looking for Granola cache file at: %s", config.cache_path)
    contents = parse_cache(config.cache_path)
    result.total_documents = len(contents.documents)
    log.debug("Found %d total documents in cache", result.total_documents)

    meetings = filter_documents(contents.documents.values(), now, start_date)
    result.matched = len(meetings)
    if not meetings:
        log.info("No meetings to export")
        return result
    log.info("Found %d valid meetings", len(meetings))

    if not config.dry_run:
        try:
            config.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise NoteWriteError(config.output_dir, str(e)) from e
    log.debug("Output directory: %s", config.output_dir)

    for index, doc in enumerate(meetings, start=1):
        filename = make_filename(doc)
        filepath = config.output_dir / filename
        log.debug("Exporting meetings [%d/%d]: %s", index, len(meetings), doc.display_title)

        if not config.force and filepath.exists():
            log.debug("Skipped (already exists): %s", filename)
            result.skipped += 1
            result.skipped_files.append(filename)
            continue

        meeting = join_meeting(doc, contents)
        content = render_meeting(meeting.document, meeting.attendees, meeting.transcript)
        write_note(filepath, content, dry_run=config.dry_run)

        result.exported += 1
        result.exported_files.append(filename)

    log.info(
        "Export complete: %d exported, %d skipped",
        result.exported,
        result.skipped,
    )
    return result
