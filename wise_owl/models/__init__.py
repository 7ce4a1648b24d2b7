"""Pydantic models for chat messages, stream events and file store payloads.

Provides type safety and validation for everything crossing the wire.

Models:
    - ChatMessage: Individual message in the conversation
    - SourceInfo: Document or web page an answer was drawn from
    - StreamRequest: Outgoing streaming chat request
    - ChunkEvent / ResponseEvent / ErrorEvent / CompleteEvent: Stream events
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from wise_owl.models.schemas import (
    ChunkEvent,
    CompleteEvent,
    DeleteResult,
    ErrorEvent,
    EventName,
    FileListResponse,
    ResponseEvent,
    SearchMode,
    StreamEvent,
    StreamRequest,
)


class SourceInfo(BaseModel):
    """A source referenced by an answer.

    Attributes:
        name: Document name or URL.
        title: Display title.
        type: Whether the source is an uploaded PDF or a web result.
        page_number: Page within the PDF, when known.
    """

    name: str
    title: str
    type: Literal["pdf", "web"]
    page_number: int | None = None


class ChatMessage(BaseModel):
    """A single chat message in the conversation.

    Attributes:
        id: Message identifier.
        role: The speaker, either the user or the bot.
        content: The message text.
        created_at: When the message was created.
        sources: Sources the answer was drawn from.
    """

    id: str
    role: Literal["user", "bot"]
    content: str
    created_at: datetime = Field(default_factory=datetime.now)
    sources: list[SourceInfo] = Field(default_factory=list)


def source_from_metadata(meta: dict[str, Any]) -> SourceInfo:
    """Map one metadata record from the answer service to a SourceInfo."""
    if meta.get("source") == "uploaded_pdf":
        doc_name = meta.get("doc_name")
        page = meta.get("page_number")
        return SourceInfo(
            name=doc_name or "Unknown PDF",
            page_number=page if isinstance(page, int) else None,
            title=f"{doc_name or 'PDF'} - Page {page or 'Unknown'}",
            type="pdf",
        )
    return SourceInfo(
        name=meta.get("link") or "Unknown web source",
        title=meta.get("title") or "Web source",
        type="web",
    )


__all__ = [
    "ChatMessage",
    "ChunkEvent",
    "CompleteEvent",
    "DeleteResult",
    "ErrorEvent",
    "EventName",
    "FileListResponse",
    "ResponseEvent",
    "SearchMode",
    "SourceInfo",
    "StreamEvent",
    "StreamRequest",
    "source_from_metadata",
]
