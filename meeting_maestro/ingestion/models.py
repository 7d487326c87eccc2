"""Data models for uploaded document ingestion."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field


@dataclass
class TranscriptSegment:
    """Uniform representation of a transcript segment."""

    speaker: str | None
    text: str


@dataclass
class Document:
    """An uploaded document reduced to plain text."""

    name: str
    content: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
