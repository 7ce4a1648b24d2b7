"""Record decoding for the answer service's line protocol.

Each record is one line, optionally prefixed with ``data:``, carrying a JSON
object tagged by ``type``. Blank and malformed lines are skipped so that a
stray heartbeat never breaks a turn.
"""

import json
import logging
from typing import Any

from wise_owl.models.schemas import ChunkEvent, CompleteEvent, ErrorEvent

logger = logging.getLogger(__name__)

DATA_MARKER = "data:"
UNKNOWN_ERROR = "Unknown error"

DecodedEvent = ChunkEvent | ErrorEvent | CompleteEvent


def _strip_marker(record: str) -> str:
    text = record.strip()
    if text.startswith(DATA_MARKER):
        text = text[len(DATA_MARKER) :].strip()
    return text


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def decode_record(record: str) -> DecodedEvent | None:
    """Decode one record into a stream event without a turn id.

    Args:
        record: A single line taken from the response body.

    Returns:
        The decoded event, or None for blank, malformed or unrecognized records.
    """
    text = _strip_marker(record)
    if not text:
        return None

    try:
        payload = json.loads(text)
    except (ValueError, RecursionError):
        # Covers JSONDecodeError and payloads nested too deeply to parse
        logger.warning(f"Skipping malformed stream record: {text[:200]}")
        return None

    if not isinstance(payload, dict):
        logger.warning(f"Skipping non-object stream record: {text[:200]}")
        return None

    kind = payload.get("type")
    classification = payload.get("classification")
    if classification is not None and not isinstance(classification, str):
        classification = str(classification)

    if kind == "chunk":
        return ChunkEvent(
            content=_as_text(payload.get("content")),
            classification=classification,
        )
    if kind == "error":
        return ErrorEvent(
            message=_as_text(payload.get("message")) or UNKNOWN_ERROR,
            details=payload,
        )
    if kind == "complete":
        return CompleteEvent(metadata=payload.get("metadata"))

    # Untagged or future record kinds still count as answer text
    content = payload.get("content")
    if content:
        return ChunkEvent(content=_as_text(content), classification=classification)

    logger.debug(f"Ignoring stream record of type {kind!r}")
    return None
