"""Pydantic request/response schemas for the Meeting Maestro API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from meeting_maestro.extraction.models import ActionItem, ActionItemStatus


class ExtractActionItemsRequest(BaseModel):
    """Request body for the /api/extract-action-items endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    notes_or_summary: str = Field(default="", alias="notesOrSummary")


class ActionItemResponse(BaseModel):
    """A single action item in API responses (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    description: str
    owner: str | None = None
    due_date: str | None = Field(default=None, alias="dueDate")
    status: ActionItemStatus = ActionItemStatus.OPEN
    source_text: str = Field(default="", alias="sourceText")

    @classmethod
    def from_item(cls, item: ActionItem) -> ActionItemResponse:
        return cls(
            id=item.id,
            description=item.description,
            owner=item.owner,
            due_date=item.due_date,
            status=item.status,
            source_text=item.source_text,
        )


class ExtractActionItemsResponse(BaseModel):
    """Response body for the /api/extract-action-items endpoint.

    ``warning`` is present only when recovery was degraded.
    """

    items: list[ActionItemResponse]
    warning: str | None = None


class UploadDocumentResponse(BaseModel):
    """Response body for the /api/upload-document endpoint."""

    id: str
    name: str
    content: str
    characters: int


class HealthResponse(BaseModel):
    """Service status; reports key validity, never the key."""

    model_config = ConfigDict(populate_by_name=True)

    status: str
    message: str
    provider: str
    api_key_set: bool = Field(alias="apiKeySet")
    api_key_validation: dict[str, Any] = Field(alias="apiKeyValidation")
