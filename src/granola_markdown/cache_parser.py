"""Read and decode Granola's double-encoded JSON cache file."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from .errors import CacheNotFoundError, CacheParseError, CacheReadError, InvalidCacheFormat
from .models import (
    CacheContents,
    CalendarEvent,
    Document,
    MeetingMetadata,
    Person,
    TranscriptEntry,
)

log = logging.getLogger(__name__)


def load_cache(cache_path: Path) -> str:
    """Return the full text of the cache file."""
    if not cache_path.exists():
        raise CacheNotFoundError(cache_path)
    try:
        raw_text = cache_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CacheReadError(cache_path, str(e)) from e
    if not raw_text.strip():
        raise CacheReadError(
            cache_path,
            "Cache file is empty. Try restarting Granola to regenerate the cache.",
        )
    log.debug("Read %d characters from %s", len(raw_text), cache_path)
    return raw_text


def parse_cache(cache_path: Path) -> CacheContents:
    """Load and decode the cache file at ``cache_path``."""
    return parse_cache_text(load_cache(cache_path))


def parse_cache_text(raw_text: str) -> CacheContents:
    """Decode the cache payload into documents, transcripts and metadata.

    The payload is encoded twice: the outer object holds a ``cache`` property
    whose value is a JSON *string*, and only that string decodes to the
    object carrying ``state``.
    """
    try:
        outer = json.loads(raw_text)
    except json.JSONDecodeError as e:
        raise CacheParseError("outer", str(e)) from e

    inner_str = outer.get("cache") if isinstance(outer, dict) else None
    if not isinstance(inner_str, str):
        raise InvalidCacheFormat("missing cache property")

    try:
        inner = json.loads(inner_str)
    except json.JSONDecodeError as e:
        raise CacheParseError("inner", str(e)) from e

    state = inner.get("state") if isinstance(inner, dict) else None
    documents = state.get("documents") if isinstance(state, dict) else None
    if not isinstance(documents, dict):
        raise InvalidCacheFormat("missing state.documents")

    version = inner.get("version", outer.get("version"))

    contents = CacheContents(
        documents=_parse_documents(documents),
        transcripts=_parse_transcripts(_optional_mapping(state, "transcripts")),
        metadata=_parse_metadata(_optional_mapping(state, "meetingsMetadata")),
        version=version if isinstance(version, int) else None,
    )
    log.debug(
        "Parsed cache v%s: %d documents, %d transcripts, %d metadata entries",
        contents.version,
        len(contents.documents),
        len(contents.transcripts),
        len(contents.metadata),
    )
    return contents


def _optional_mapping(state: dict, key: str) -> dict:
    """Return ``state[key]``, treating a missing or null value as empty."""
    value = state.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidCacheFormat(f"state.{key} is not a mapping")
    return value


def _try_parse_timestamp(value: str | int | float | None) -> datetime | None:
    """Parse a timestamp string or number into an aware datetime, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        # Epoch millis or seconds
        if value > 1e12:
            value = value / 1000
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        for fmt in ("%Y-%m-%dT%H:%M:%S.%fZ", "%Y-%m-%dT%H:%M:%SZ", "%Y-%m-%dT%H:%M:%S"):
            try:
                return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
            except ValueError:
                continue
        try:
            return _try_parse_timestamp(float(value))
        except ValueError:
            pass
        # Calendar times carry UTC offsets, e.g. 2024-03-01T10:00:00-05:00
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
        else:
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
    return None


def _parse_timestamp(value: str | int | float | None) -> datetime:
    """Like ``_try_parse_timestamp`` but falls back to the current time."""
    parsed = _try_parse_timestamp(value)
    if parsed is None:
        return datetime.now(tz=timezone.utc)
    return parsed


def _parse_person(raw: dict, name_key: str = "name") -> Person:
    return Person(name=raw.get(name_key) or None, email=raw.get("email") or None)


def _parse_calendar_event(gcal: dict) -> CalendarEvent:
    start = gcal.get("start")
    end = gcal.get("end")
    return CalendarEvent(
        id=gcal.get("id"),
        summary=gcal.get("summary"),
        start=_try_parse_timestamp(start.get("dateTime")) if isinstance(start, dict) else None,
        end=_try_parse_timestamp(end.get("dateTime")) if isinstance(end, dict) else None,
        attendees=[
            _parse_person(a, name_key="displayName")
            for a in gcal.get("attendees") or []
            if isinstance(a, dict)
        ],
    )


def _text(value: object) -> str:
    """Coerce an optional scalar field to a string, empty when absent."""
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value)


def _parse_document(doc_id: str, doc: dict) -> Document:
    """Parse a single document from the cache."""
    gcal = doc.get("google_calendar_event")
    return Document(
        id=doc_id,
        title=_text(doc.get("title")),
        created_at=_parse_timestamp(doc.get("created_at") or doc.get("createdAt")),
        deleted_at=doc.get("deleted_at") or None,
        valid_meeting=bool(doc.get("valid_meeting", False)),
        notes_plain=doc.get("notes_plain") or "",
        notes_markdown=doc.get("notes_markdown") or doc.get("notesMarkdown") or "",
        calendar_event=_parse_calendar_event(gcal) if isinstance(gcal, dict) else None,
    )


def _parse_documents(documents: dict) -> dict[str, Document]:
    results: dict[str, Document] = {}
    for doc_id, doc in documents.items():
        if not isinstance(doc, dict):
            log.warning("Skipping malformed document %s", doc_id)
            continue
        results[doc_id] = _parse_document(doc_id, doc)
    return results


def _sequence_number(value: object) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0


def _parse_transcript_entry(entry: dict) -> TranscriptEntry:
    return TranscriptEntry(
        text=entry.get("text") or "",
        source=entry.get("source") or "",
        speaker=entry.get("speaker") or "",
        sequence_number=_sequence_number(entry.get("sequence_number")),
    )


def _parse_transcripts(transcripts: dict) -> dict[str, list[TranscriptEntry]]:
    # Values are normally a list of entries; older caches wrap them in a dict
    results: dict[str, list[TranscriptEntry]] = {}
    for doc_id, transcript_data in transcripts.items():
        if isinstance(transcript_data, list):
            entries = transcript_data
        elif isinstance(transcript_data, dict):
            entries = transcript_data.get("entries", transcript_data.get("segments", []))
        else:
            log.warning("Skipping malformed transcript for %s", doc_id)
            continue
        results[doc_id] = [
            _parse_transcript_entry(entry) for entry in entries if isinstance(entry, dict)
        ]
    return results


def _parse_metadata(meetings_meta: dict) -> dict[str, MeetingMetadata]:
    results: dict[str, MeetingMetadata] = {}
    for doc_id, meta in meetings_meta.items():
        if not isinstance(meta, dict):
            log.warning("Skipping malformed metadata for %s", doc_id)
            continue
        creator = meta.get("creator")
        results[doc_id] = MeetingMetadata(
            creator=_parse_person(creator) if isinstance(creator, dict) else None,
            attendees=[
                _parse_person(a) for a in meta.get("attendees") or [] if isinstance(a, dict)
            ],
        )
    return results
