"""Data models for Granola cache records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass
class Person:
    name: str | None = None
    email: str | None = None


@dataclass
class CalendarEvent:
    """Snapshot of the Google Calendar event a document was created from."""

    id: str | None = None
    summary: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    attendees: list[Person] = field(default_factory=list)


@dataclass
class Document:
    id: str
    created_at: datetime
    title: str = ""
    deleted_at: str | None = None
    valid_meeting: bool = False
    notes_plain: str = ""
    notes_markdown: str = ""
    calendar_event: CalendarEvent | None = None

    @property
    def display_title(self) -> str:
        return self.title or f"Untitled Meeting {self.id}"


@dataclass
class TranscriptEntry:
    text: str
    source: str = ""
    speaker: str = ""
    sequence_number: int = 0


@dataclass
class MeetingMetadata:
    creator: Person | None = None
    attendees: list[Person] = field(default_factory=list)


@dataclass
class CacheContents:
    """The three record sets decoded from the cache, all keyed by document id."""

    documents: dict[str, Document]
    transcripts: dict[str, list[TranscriptEntry]] = field(default_factory=dict)
    metadata: dict[str, MeetingMetadata] = field(default_factory=dict)
    version: int | None = None


@dataclass
class JoinedMeeting:
    """Render-ready view of one document. Built per export, never persisted."""

    document: Document
    attendees: list[str]
    transcript: str


@dataclass
class ExportResult:
    output_dir: Path
    start_date: datetime | None = None
    end_date: datetime | None = None
    total_documents: int = 0
    matched: int = 0
    exported: int = 0
    skipped: int = 0
    exported_files: list[str] = field(default_factory=list)
    skipped_files: list[str] = field(default_factory=list)
    dry_run: bool = False
