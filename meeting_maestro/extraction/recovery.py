"""Best-effort recovery of action items from untrusted model output.

The model is asked for ``{"items": [...]}`` but under a token ceiling it often
returns JSON that is wrapped in prose, cut off mid-array, or missing closing
brackets. Recovery runs in tiers:

1. Take the span from the first ``{`` to the last ``}`` (or ``{}`` if none).
2. Parse that span strictly and read its ``items`` array.
3. If that fails, split the text after the ``"items": [`` marker on ``},``
   and parse each element on its own, dropping the ones that still fail.

Every surviving record is then normalized into an :class:`ActionItem`.
Nothing here raises on malformed input; the caller gets a possibly empty list
and a ``degraded`` flag instead.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any

from meeting_maestro.extraction.models import ActionItem, ActionItemStatus, ExtractionResult

logger = logging.getLogger(__name__)

_ITEMS_MARKER = '"items"'
_ELEMENT_DELIMITER = "},"

_STATUS_ALIASES: dict[str, ActionItemStatus] = {
    "open": ActionItemStatus.OPEN,
    "in progress": ActionItemStatus.IN_PROGRESS,
    "in_progress": ActionItemStatus.IN_PROGRESS,
    "in-progress": ActionItemStatus.IN_PROGRESS,
    "done": ActionItemStatus.DONE,
}

_decoder = json.JSONDecoder()


def extract_object_span(text: str) -> str:
    """Return the text from the first ``{`` to the last ``}``, or ``"{}"``."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return "{}"
    return text[start : end + 1]


def parse_strict(span: str) -> list[Any] | None:
    """Parse *span* as a JSON object and return its ``items`` array.

    Returns ``None`` when the span is not valid JSON. A valid object without a
    list under ``items`` yields an empty list.
    """
    try:
        data = json.loads(span)
    except (json.JSONDecodeError, RecursionError):
        return None

    if not isinstance(data, dict):
        return []
    items = data.get("items")
    return items if isinstance(items, list) else []


def _items_tail(span: str) -> str | None:
    """Return everything after the ``"items": [`` marker, whitespace tolerant."""
    marker = span.find(_ITEMS_MARKER)
    while marker != -1:
        rest = span[marker + len(_ITEMS_MARKER) :].lstrip()
        if rest.startswith(":"):
            rest = rest[1:].lstrip()
            if rest.startswith("["):
                return rest[1:]
        marker = span.find(_ITEMS_MARKER, marker + 1)
    return None


def salvage_truncated_items(span: str) -> list[dict[str, Any]]:
    """Recover whole array elements from a truncated ``items`` array.

    The split on ``},`` strips the closing brace from every fragment but the
    last, so it is put back before parsing. A fragment must be exactly one
    object; only the last may be followed by the array's closing ``]}``.
    Fragments that start or end inside a nested value are dropped.
    """
    tail = _items_tail(span)
    if tail is None:
        return []

    fragments = tail.split(_ELEMENT_DELIMITER)
    last = len(fragments) - 1
    records: list[dict[str, Any]] = []
    for index, fragment in enumerate(fragments):
        if index < last:
            fragment += "}"
        record = _parse_fragment(fragment, allow_closers=index == last)
        if record is not None:
            records.append(record)
    return records


def _parse_fragment(fragment: str, allow_closers: bool) -> dict[str, Any] | None:
    body = fragment.lstrip()
    if not body.startswith("{"):
        return None
    try:
        record, end = _decoder.raw_decode(body)
    except (json.JSONDecodeError, RecursionError):
        return None
    rest = body[end:].strip()
    if allow_closers:
        rest = rest.strip("]} \t\r\n")
    if rest or not isinstance(record, dict):
        return None
    return record


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return str(value)
    return None


def _optional_text(value: Any) -> str | None:
    text = _as_text(value)
    if text is None or not text.strip():
        return None
    return text


def _normalize_status(value: Any) -> ActionItemStatus:
    text = _as_text(value)
    if text is None:
        return ActionItemStatus.OPEN
    return _STATUS_ALIASES.get(text.strip().lower(), ActionItemStatus.OPEN)


def normalize_item(record: dict[str, Any], source_text: str) -> ActionItem:
    """Map one upstream record onto the canonical :class:`ActionItem`.

    Unknown fields are dropped and any ``sourceText`` from the model is
    replaced by *source_text*.
    """
    item_id = _optional_text(record.get("id"))
    due_date = record.get("dueDate", record.get("due_date"))
    return ActionItem(
        id=item_id.strip() if item_id else str(uuid.uuid4()),
        description=_as_text(record.get("description")) or "",
        owner=_optional_text(record.get("owner")),
        due_date=_optional_text(due_date),
        status=_normalize_status(record.get("status")),
        source_text=source_text,
    )


def recover_action_items(raw_text: str | None, source_text: str) -> ExtractionResult:
    """Recover as many action items as possible from raw model output.

    Args:
        raw_text: The completion text, expected to hold ``{"items": [...]}``.
        source_text: The notes or summary the items were extracted from.

    Returns:
        An :class:`ExtractionResult`; ``degraded`` is set when strict parsing
        failed or when no items survived.
    """
    span = extract_object_span(raw_text or "")

    candidates = parse_strict(span)
    degraded = False
    if candidates is None:
        candidates = salvage_truncated_items(span)
        degraded = True

    items = [
        normalize_item(record, source_text) for record in candidates if isinstance(record, dict)
    ]
    if not items:
        degraded = True

    if degraded:
        logger.warning(
            "Degraded action-item recovery: %d items from %d chars of model output",
            len(items),
            len(raw_text or ""),
        )
    return ExtractionResult(items=items, degraded=degraded)
