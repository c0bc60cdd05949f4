"""Render meetings as Markdown and write them to the output directory."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone, tzinfo
from pathlib import Path

from .errors import NoteWriteError
from .models import Document

log = logging.getLogger(__name__)

_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")

NO_ATTENDEES = "*No attendees recorded*"
NO_NOTES = "*No notes recorded*"
NO_TRANSCRIPT = "*No transcript available*"


def make_slug(text: str) -> str:
    """Lower-case, hyphen-separated, ASCII alphanumerics only."""
    return _NON_ALNUM_RUN.sub("-", text.lower()).strip("-")


def make_filename(doc: Document) -> str:
    """Generate a filename like 'YYYY-MM-DD-title.md'."""
    slug = make_slug(doc.title) if doc.title else ""
    if not slug:
        slug = make_slug(f"untitled-meeting-{doc.id}")
    date_str = doc.created_at.astimezone(timezone.utc).strftime("%Y-%m-%d")
    return f"{date_str}-{slug}.md"


def format_datetime(value: datetime, tz: tzinfo | None = None) -> str:
    """Long human format, e.g. 'Friday, March 1, 2024 at 10:00 AM'.

    Weekday and month names follow the active locale. With no ``tz`` the
    value is shown in the local time zone.
    """
    local = value.astimezone(tz)
    return f"{local:%A}, {local:%B} {local.day}, {local.year} at {local:%I:%M %p}"


def _plural(count: int, unit: str) -> str:
    # Only counts above one take an "s", matching existing archives ("0 minute")
    return f"{count} {unit}{'s' if count > 1 else ''}"


def format_duration(start: datetime, end: datetime) -> str:
    # Truncated to whole minutes, never rounded
    total_minutes = max(int((end - start).total_seconds() // 60), 0)
    hours, minutes = divmod(total_minutes, 60)
    if hours > 0:
        # Whole hours keep the trailing space existing archives carry
        minutes_part = _plural(minutes, "minute") if minutes > 0 else ""
        return f"{_plural(hours, 'hour')} {minutes_part}"
    return _plural(minutes, "minute")


def build_time_block(doc: Document, tz: tzinfo | None = None) -> str:
    event = doc.calendar_event
    if event is not None and event.start is not None:
        start = format_datetime(event.start, tz)
        if event.end is not None:
            end = format_datetime(event.end, tz)
            duration = format_duration(event.start, event.end)
            return f"**Start:** {start}\n**End:** {end}\n**Duration:** {duration}"
        return f"**Start:** {start}"
    return f"**Date:** {format_datetime(doc.created_at, tz)}"


def build_attendee_list(attendees: list[str]) -> str:
    if not attendees:
        return NO_ATTENDEES
    return "\n".join(f"- {a}" for a in attendees)


def render_meeting(
    doc: Document,
    attendees: list[str],
    transcript: str,
    tz: tzinfo | None = None,
) -> str:
    """Assemble the complete markdown note for one meeting."""
    notes = doc.notes_markdown or doc.notes_plain or NO_NOTES
    sections = [
        f"# {doc.display_title}",
        build_time_block(doc, tz),
        "---",
        "## Attendees",
        build_attendee_list(attendees),
        "---",
        "## Notes",
        notes,
        "---",
        "## Transcript",
        transcript or NO_TRANSCRIPT,
    ]
    return "\n\n".join(sections) + "\n"


def write_note(filepath: Path, content: str, *, dry_run: bool = False) -> Path:
    """Write the note to disk, replacing any existing file. Returns the path."""
    if dry_run:
        log.info("[DRY RUN] Would write %s (%d chars)", filepath, len(content))
        return filepath

    try:
        filepath.write_text(content, encoding="utf-8")
    except OSError as e:
        raise NoteWriteError(filepath, str(e)) from e
    log.debug("Wrote %s (%d chars)", filepath, len(content))
    return filepath
