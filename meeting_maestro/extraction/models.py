"""Data models for action-item extraction results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

DEGRADED_WARNING = "Partial or truncated response from AI"


class ActionItemStatus(StrEnum):
    OPEN = "open"
    IN_PROGRESS = "in progress"
    DONE = "done"


@dataclass
class ActionItem:
    """A single normalized action item."""

    id: str
    description: str
    owner: str | None = None
    due_date: str | None = None
    status: ActionItemStatus = ActionItemStatus.OPEN
    source_text: str = ""


@dataclass
class ExtractionResult:
    """Recovered items plus whether recovery fell back past strict parsing."""

    items: list[ActionItem] = field(default_factory=list)
    degraded: bool = False

    @property
    def warning(self) -> str | None:
        return DEGRADED_WARNING if self.degraded else None
