"""Exceptions raised by the export pipeline.

Every error here is fatal to a run: nothing is retried and nothing is
downgraded to a warning on the way up to the caller.
"""

from __future__ import annotations

from pathlib import Path


class GranolaExportError(Exception):
    """Base class for all export failures."""


class CacheNotFoundError(GranolaExportError, FileNotFoundError):
    """The Granola cache file does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(
            f"Cache file not found at {path}. "
            "Make sure Granola is installed and has been used."
        )


class CacheReadError(GranolaExportError):
    """The cache file exists but could not be read."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Failed to read cache file {path}: {reason}")


class CacheParseError(GranolaExportError):
    """JSON syntax error while decoding one of the two cache layers."""

    def __init__(self, stage: str, reason: str):
        self.stage = stage
        super().__init__(f"Malformed JSON in {stage} cache layer: {reason}")


class InvalidCacheFormat(GranolaExportError, ValueError):
    """Well-formed JSON that lacks a required structural property."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Invalid cache format - {detail}. Cache may be corrupted.")


class NoteWriteError(GranolaExportError):
    """An output note could not be written."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Failed to write {path}: {reason}")
