"""LLM-powered extraction of action items from meeting notes or a summary."""

from __future__ import annotations

import logging

from meeting_maestro.config import Settings, settings
from meeting_maestro.errors import InputMissingError
from meeting_maestro.extraction.models import ExtractionResult
from meeting_maestro.extraction.recovery import recover_action_items
from meeting_maestro.llm.client import CompletionClient, build_completion_client

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are an expert meeting assistant.
Extract all actionable items from the following meeting notes or summary.
For each action item, include: description, owner (if mentioned), due date (if mentioned), \
and status (default to 'open').
Respond ONLY with a valid JSON object in the following format, and nothing else: \
no prose, no markdown, no comments.

{
  "items": [
    {
      "id": "string (uuid, can be blank)",
      "description": "string",
      "owner": "string (optional)",
      "dueDate": "string (optional)",
      "status": "open",
      "sourceText": "string"
    }
  ]
}
"""


async def extract_action_items(
    notes_or_summary: str,
    client: CompletionClient | None = None,
    config: Settings | None = None,
) -> ExtractionResult:
    """Extract action items with a single upstream completion call.

    Args:
        notes_or_summary: Meeting notes or a generated summary.
        client: Completion client to use; built from *config* when omitted.
        config: Settings to read models and limits from.

    Returns:
        The recovered items and the degradation flag.

    Raises:
        InputMissingError: If *notes_or_summary* is blank. No upstream call is made.
        UpstreamUnavailableError: If no client is given and none can be built.
        UpstreamFailureError: If the completion call fails.
    """
    if not notes_or_summary or not notes_or_summary.strip():
        raise InputMissingError("Missing notes or summary")

    cfg = config or settings
    if client is None:
        client = build_completion_client(cfg.llm_config())

    content = await client.complete(
        model=cfg.llm_model_for("extraction"),
        system=SYSTEM_PROMPT,
        user=notes_or_summary,
        max_tokens=cfg.extraction_max_tokens,
        temperature=cfg.extraction_temperature,
        json_mode=True,
    )
    logger.debug("Raw extraction content: %s", content)

    result = recover_action_items(content, notes_or_summary)
    logger.info("Extracted %d action items (degraded=%s)", len(result.items), result.degraded)
    return result
