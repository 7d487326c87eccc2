"""Streaming meeting summary generation."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence

from meeting_maestro.config import Settings, settings
from meeting_maestro.errors import InputMissingError
from meeting_maestro.ingestion.models import Document
from meeting_maestro.llm.client import CompletionClient, build_completion_client

SYSTEM_PROMPT = (
    "You are an expert meeting summarizer. Generate a comprehensive, professional "
    "summary that:\n"
    "1. Captures the key discussion points and insights\n"
    "2. Highlights important action items and responsibilities\n"
    "3. Provides a clear, structured overview of the meeting\n"
    "4. Uses markdown formatting for readability\n"
    "5. Includes section headers to organize the summary\n"
    "6. Is concise but thorough, aiming for 700-1050 words"
)


def build_summary_prompt(notes: str, documents: Sequence[Document] = ()) -> str:
    """Format the user message from the notes and any uploaded documents."""
    if documents:
        attached = "\n\n".join(f"Document {doc.name}:\n{doc.content}" for doc in documents)
    else:
        attached = "No additional documents"
    return f"Meeting Notes:\n{notes}\n\nAdditional Documents:\n{attached}"


def stream_summary(
    notes: str,
    documents: Sequence[Document] = (),
    client: CompletionClient | None = None,
    config: Settings | None = None,
) -> AsyncIterator[str]:
    """Start a streaming summary completion and return its text deltas.

    Input and credentials are checked eagerly; the upstream call itself starts
    when the returned iterator is first advanced.

    Raises:
        InputMissingError: If *notes* is blank.
        UpstreamUnavailableError: If no client is given and none can be built.
    """
    if not notes or not notes.strip():
        raise InputMissingError("Meeting notes are required")

    cfg = config or settings
    if client is None:
        client = build_completion_client(cfg.llm_config())

    return client.stream(
        model=cfg.llm_model_for("summary"),
        system=SYSTEM_PROMPT,
        user=build_summary_prompt(notes, documents),
        max_tokens=cfg.summary_max_tokens,
        temperature=cfg.summary_temperature,
    )
