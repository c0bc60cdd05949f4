"""Select the documents that belong in an export."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from .models import Document


def compute_start_date(now: datetime, days: int | None) -> datetime | None:
    """Start of the look-back window, or None when exporting all time."""
    if days is None:
        return None
    return now - timedelta(days=days)


def is_included(document: Document, now: datetime, start_date: datetime | None = None) -> bool:
    if not document.valid_meeting or document.deleted_at:
        return False
    if start_date is None:
        return True
    return start_date <= document.created_at <= now


def filter_documents(
    documents: Iterable[Document],
    now: datetime,
    start_date: datetime | None = None,
) -> list[Document]:
    """Keep included documents, preserving cache order."""
    return [doc for doc in documents if is_included(doc, now, start_date)]
