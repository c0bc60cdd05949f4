"""Shared fixtures for granola_markdown tests."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from granola_markdown.config import Config
from granola_markdown.models import (
    CalendarEvent,
    Document,
    MeetingMetadata,
    Person,
    TranscriptEntry,
)


def encode_cache(state: dict, version: int | None = 3) -> str:
    """Build cache file text the way Granola stores it: JSON inside a JSON string."""
    inner: dict = {"state": state}
    if version is not None:
        inner["version"] = version
    return json.dumps({"cache": json.dumps(inner)})


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_document(fixed_now: datetime) -> Document:
    return Document(
        id="doc-123",
        title="Team Standup",
        created_at=fixed_now,
        valid_meeting=True,
        notes_markdown="Some notes here.",
        calendar_event=CalendarEvent(
            id="evt-1",
            summary="Team Standup",
            start=datetime(2024, 6, 15, 9, 0, tzinfo=timezone.utc),
            end=datetime(2024, 6, 15, 9, 30, tzinfo=timezone.utc),
            attendees=[
                Person(name="Carol", email="carol@example.com"),
                Person(email="dave@example.com"),
            ],
        ),
    )


@pytest.fixture
def sample_metadata() -> MeetingMetadata:
    return MeetingMetadata(
        creator=Person(name="Alice", email="alice@example.com"),
        attendees=[
            Person(name="Alice", email="alice@example.com"),
            Person(name="Bob", email="bob@example.com"),
        ],
    )


@pytest.fixture
def sample_transcript() -> list[TranscriptEntry]:
    return [
        TranscriptEntry(text="Hi Alice", speaker="Bob", sequence_number=2),
        TranscriptEntry(text="Hello everyone", source="microphone", sequence_number=1),
    ]


@pytest.fixture
def team_sync_state() -> dict:
    return {
        "documents": {
            "d1": {
                "id": "d1",
                "title": "Team Sync",
                "created_at": "2024-03-01T10:00:00Z",
                "valid_meeting": True,
                "notes_markdown": "## Agenda\n- item",
            }
        },
        "meetingsMetadata": {
            "d1": {"creator": {"name": "Alice", "email": "a@x.com"}},
        },
        "transcripts": {
            "d1": [
                {"text": "hi", "source": "microphone", "sequence_number": 2},
                {"text": "hello", "speaker": "Bob", "sequence_number": 1},
            ]
        },
    }


@pytest.fixture
def cache_file(tmp_path: Path, team_sync_state: dict) -> Path:
    path = tmp_path / "cache-v3.json"
    path.write_text(encode_cache(team_sync_state), encoding="utf-8")
    return path


@pytest.fixture
def export_config(tmp_path: Path, cache_file: Path) -> Config:
    return Config(output_dir=tmp_path / "meetings", cache_path=cache_file)
