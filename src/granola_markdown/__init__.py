"""Export Granola meeting notes and transcripts to Markdown files."""

__version__ = "1.0.0"
