"""Join documents with their transcript entries and meeting metadata."""

from __future__ import annotations

from .models import CacheContents, Document, JoinedMeeting, MeetingMetadata, Person, TranscriptEntry

_MICROPHONE_SOURCE = "microphone"


def format_person(person: Person) -> str:
    """Format as ``name <email>``, ``name`` or ``<email>``."""
    name = person.name or ""
    email = f"<{person.email}>" if person.email else ""
    separator = " " if name and email else ""
    return f"{name}{separator}{email}".strip()


def _format_people(people: list[Person]) -> list[str]:
    return [s for s in (format_person(p) for p in people) if s]


def resolve_attendees(document: Document, metadata: MeetingMetadata | None) -> list[str]:
    """Return display strings for everyone in the meeting, creator first.

    Metadata attendees replace calendar attendees outright; the two sources
    are never merged.
    """
    attendees: list[str] = []
    if metadata is not None and metadata.attendees:
        attendees.extend(_format_people(metadata.attendees))
    elif document.calendar_event is not None and document.calendar_event.attendees:
        attendees.extend(_format_people(document.calendar_event.attendees))

    if metadata is not None and metadata.creator is not None:
        creator = format_person(metadata.creator)
        if creator and creator not in attendees:
            attendees.insert(0, creator)

    return attendees


def _speaker_label(entry: TranscriptEntry) -> str:
    if entry.source == _MICROPHONE_SOURCE:
        return "me"
    return entry.speaker or "them"


def resolve_transcript(entries: list[TranscriptEntry]) -> str:
    """Render transcript entries as ``speaker: text`` lines in sequence order."""
    ordered = sorted(entries, key=lambda e: e.sequence_number)
    return "\n".join(f"{_speaker_label(e)}: {e.text}" for e in ordered)


def join_meeting(document: Document, contents: CacheContents) -> JoinedMeeting:
    return JoinedMeeting(
        document=document,
        attendees=resolve_attendees(document, contents.metadata.get(document.id)),
        transcript=resolve_transcript(contents.transcripts.get(document.id, [])),
    )
