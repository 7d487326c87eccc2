"""Document upload endpoint: return the plain text extracted from a file."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, UploadFile

from meeting_maestro.api.models import UploadDocumentResponse
from meeting_maestro.api.routes.summary import read_documents

router = APIRouter()


@router.post("/api/upload-document", response_model=UploadDocumentResponse)
async def upload_document(file: Annotated[UploadFile, File(...)]) -> UploadDocumentResponse:
    """Extract plain text from an uploaded notes or transcript file.

    The text can be pasted into the notes field or sent along as a document
    with a summary request.
    """
    (document,) = await read_documents([file])
    return UploadDocumentResponse(
        id=document.id,
        name=document.name,
        content=document.content,
        characters=len(document.content),
    )
