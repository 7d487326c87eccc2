"""Reduce uploaded documents to plain text for the summary prompt.

Plain text and markdown pass through unchanged. WebVTT captions and JSON
transcripts are flattened to ``Speaker: text`` lines so the model sees the
conversation rather than timestamps and markup.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable

from meeting_maestro.ingestion.models import Document, TranscriptSegment

logger = logging.getLogger(__name__)

UNNAMED_DOCUMENT = "Unnamed Document"

_TIMESTAMP_RE = re.compile(
    r"(\d{1,2}:)?\d{2}:\d{2}[.,]\d{3}\s*-->\s*(\d{1,2}:)?\d{2}:\d{2}[.,]\d{3}"
)
_SPEAKER_RE = re.compile(r"^(.+?):\s+(.+)$")
# Teams <v SpeakerName> tag; the closing </v> is optional per the WebVTT spec.
_TEAMS_VOICE_RE = re.compile(r"^<v ([^>]+)>(.*?)(?:</v>)?$", re.DOTALL)


def parse_vtt(content: str) -> list[TranscriptSegment]:
    """Parse WebVTT cues into segments, keeping colon-style or ``<v>`` speakers."""
    segments: list[TranscriptSegment] = []
    lines = content.strip().splitlines()
    i = 0
    while i < len(lines):
        if not _TIMESTAMP_RE.search(lines[i]):
            i += 1
            continue

        text_lines: list[str] = []
        i += 1
        while i < len(lines) and lines[i].strip() and not _TIMESTAMP_RE.search(lines[i]):
            text_lines.append(lines[i].strip())
            i += 1

        text = " ".join(text_lines)
        speaker: str | None = None
        teams_match = _TEAMS_VOICE_RE.match(text)
        if teams_match:
            speaker = teams_match.group(1).strip()
            text = teams_match.group(2).strip()
        else:
            speaker_match = _SPEAKER_RE.match(text)
            if speaker_match:
                speaker, text = speaker_match.group(1), speaker_match.group(2)

        if text:
            segments.append(TranscriptSegment(speaker=speaker, text=text))

    return segments


def parse_json(content: str) -> list[TranscriptSegment]:
    """Parse a JSON transcript.

    Supports ``{"utterances": [...]}`` (AssemblyAI), ``{"transcription": [...]}``
    (MeetingBank, ``speaker_id``) and ``{"segments": [...]}``.

    Raises:
        ValueError: If the content is not JSON or has none of those keys.
    """
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError("JSON transcript must be an object")

    for key, speaker_field in (
        ("utterances", "speaker"),
        ("transcription", "speaker_id"),
        ("segments", "speaker"),
    ):
        if key in data:
            return [
                TranscriptSegment(speaker=entry.get(speaker_field), text=entry["text"])
                for entry in data[key]
                if isinstance(entry, dict) and entry.get("text")
            ]

    msg = f"Unrecognized JSON transcript format. Keys: {list(data.keys())}"
    raise ValueError(msg)


def segments_to_text(segments: list[TranscriptSegment]) -> str:
    return "\n".join(
        f"{segment.speaker}: {segment.text}" if segment.speaker else segment.text
        for segment in segments
    )


def _extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def extract_text(filename: str, content: str) -> str:
    """Return the plain text of a document named *filename*.

    Structured transcripts that fail to parse fall back to their raw text.
    """
    parsers: dict[str, Callable[[str], list[TranscriptSegment]]] = {
        "vtt": parse_vtt,
        "json": parse_json,
    }
    parser = parsers.get(_extension(filename))
    if parser is None:
        return content.strip()

    try:
        segments = parser(content)
    except (ValueError, KeyError, TypeError) as exc:
        logger.info("Could not parse %s as a transcript (%s); using raw text", filename, exc)
        return content.strip()
    return segments_to_text(segments) if segments else content.strip()


def document_from_upload(filename: str | None, raw: bytes) -> Document:
    """Decode an uploaded file into a :class:`Document`.

    Invalid UTF-8 sequences are replaced rather than rejected.
    """
    name = filename or UNNAMED_DOCUMENT
    content = raw.decode("utf-8", errors="replace")
    return Document(name=name, content=extract_text(name, content))
