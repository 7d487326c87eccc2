"""Action-item extraction endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from meeting_maestro.api.errors import to_http_exception
from meeting_maestro.api.models import (
    ActionItemResponse,
    ExtractActionItemsRequest,
    ExtractActionItemsResponse,
)
from meeting_maestro.errors import MaestroError
from meeting_maestro.extraction.extractor import extract_action_items

router = APIRouter()


@router.post(
    "/api/extract-action-items",
    response_model=ExtractActionItemsResponse,
    response_model_exclude_none=True,
)
async def extract_items(request: ExtractActionItemsRequest) -> ExtractActionItemsResponse:
    """Extract action items from meeting notes or a summary.

    A degraded recovery (truncated or malformed model output, or no items at
    all) still returns 200, with ``warning`` set.
    """
    try:
        result = await extract_action_items(request.notes_or_summary)
    except MaestroError as exc:
        raise to_http_exception(exc) from exc

    return ExtractActionItemsResponse(
        items=[ActionItemResponse.from_item(item) for item in result.items],
        warning=result.warning,
    )
