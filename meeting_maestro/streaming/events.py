"""Server-sent event frames emitted by the summary relay."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import StrEnum

SSE_MEDIA_TYPE = "text/event-stream"
SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"}


class EventKind(StrEnum):
    CONTENT = "content"
    DONE = "done"


@dataclass(frozen=True)
class StreamEvent:
    """One frame on the wire; ``payload`` is only set for content frames."""

    kind: EventKind
    payload: str | None = None

    @classmethod
    def content(cls, text: str) -> StreamEvent:
        return cls(kind=EventKind.CONTENT, payload=text)

    @classmethod
    def done(cls) -> StreamEvent:
        return cls(kind=EventKind.DONE)

    def to_sse(self) -> str:
        """Encode as ``data: <json>\\n\\n``."""
        if self.kind is EventKind.CONTENT:
            body: dict[str, str] = {"content": self.payload or ""}
        else:
            body = {"type": "done"}
        return f"data: {json.dumps(body, ensure_ascii=False)}\n\n"
