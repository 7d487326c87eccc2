"""Summary endpoint: stream a generated meeting summary as server-sent events."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from meeting_maestro.api.errors import to_http_exception
from meeting_maestro.config import settings
from meeting_maestro.errors import InputMissingError, MaestroError
from meeting_maestro.ingestion.documents import document_from_upload
from meeting_maestro.ingestion.models import Document
from meeting_maestro.streaming.events import SSE_HEADERS, SSE_MEDIA_TYPE
from meeting_maestro.streaming.relay import RelayStream, open_relay
from meeting_maestro.summary.generation import stream_summary

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_documents(uploads: list[UploadFile]) -> list[Document]:
    """Read uploaded files into documents, enforcing the per-file size limit."""
    documents: list[Document] = []
    for upload in uploads:
        raw = await upload.read()
        if len(raw) > settings.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=(
                    f"{upload.filename or 'Document'} is too large. Maximum size is "
                    f"{settings.max_upload_bytes // (1024 * 1024)} MB."
                ),
            )
        documents.append(document_from_upload(upload.filename, raw))
    return documents


async def _encode(events: RelayStream) -> AsyncIterator[str]:
    try:
        async for event in events:
            yield event.to_sse()
    finally:
        await events.aclose()


@router.post("/api/generate-summary")
async def generate_summary(
    notes: Annotated[str, Form()] = "",
    note: Annotated[str, Form()] = "",
    documents: Annotated[list[UploadFile] | None, File()] = None,
) -> StreamingResponse:
    """Generate a meeting summary and stream it back as it is written.

    Each frame is ``data: {"content": "..."}``; the stream ends with
    ``data: {"type": "done"}``. Errors raised before the first content frame
    come back as regular JSON error responses.
    """
    text = notes or note
    if not text.strip():
        raise to_http_exception(InputMissingError("Meeting notes are required"))

    docs = await read_documents(documents or [])

    try:
        deltas = stream_summary(text, docs)
        events = await open_relay(deltas, timeout=settings.stream_timeout_seconds)
    except MaestroError as exc:
        logger.warning("Summary generation failed before streaming: %s", exc.message)
        raise to_http_exception(exc) from exc

    # Closes the relay even when the body iterator never starts.
    return StreamingResponse(
        _encode(events),
        media_type=SSE_MEDIA_TYPE,
        headers=SSE_HEADERS,
        background=BackgroundTask(events.aclose),
    )
