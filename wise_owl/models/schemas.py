from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchMode(str, Enum):
    """Where the answer service looks for context."""

    STUDY_MATERIAL = "study_material"
    WEB_SEARCH = "web_search"


class EventName(str, Enum):
    """Names published on the event bus."""

    CHUNK = "chunk"
    RESPONSE = "response"
    ERROR = "error"
    COMPLETE = "complete"


class StreamRequest(BaseModel):
    """Request payload for the streaming chat endpoint.

    Attributes:
        message: User's question.
        n_results: Number of context passages the service should retrieve.
        search_mode: Study material or web search.
        pdf_names: Optional filter restricting retrieval to these documents.
    """

    model_config = ConfigDict(frozen=True)

    message: str = Field(..., min_length=1)
    n_results: int = Field(default=5, ge=1, le=50)
    search_mode: SearchMode = SearchMode.STUDY_MATERIAL
    pdf_names: frozenset[str] | None = None

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: str) -> str:
        """Strip whitespace from message before validation."""
        if isinstance(v, str):
            return v.strip()
        return v

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON body sent to the service."""
        payload: dict[str, Any] = {
            "message": self.message,
            "n_results": self.n_results,
            "search_mode": self.search_mode.value,
        }
        if self.pdf_names:
            payload["pdf_names"] = sorted(self.pdf_names)
        return payload


class ChunkEvent(BaseModel):
    """A piece of answer text as it arrived on the wire."""

    model_config = ConfigDict(frozen=True)

    type: Literal["chunk"] = "chunk"
    content: str
    classification: str | None = None
    turn_id: str | None = None


class ResponseEvent(BaseModel):
    """The answer accumulated so far, published alongside every chunk."""

    model_config = ConfigDict(frozen=True)

    type: Literal["response"] = "response"
    content: str
    turn_id: str | None = None


class ErrorEvent(BaseModel):
    """Terminal failure of a turn.

    Attributes:
        message: Human readable description.
        details: Remote payload for protocol errors, status info for HTTP errors.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["error"] = "error"
    message: str
    details: Any = None
    turn_id: str | None = None


class CompleteEvent(BaseModel):
    """Terminal success of a turn."""

    model_config = ConfigDict(frozen=True)

    type: Literal["complete"] = "complete"
    metadata: Any = None
    turn_id: str | None = None


StreamEvent = ChunkEvent | ResponseEvent | ErrorEvent | CompleteEvent


class FileListResponse(BaseModel):
    """Documents the file store holds for a user."""

    file_names: list[str] = Field(default_factory=list)


class DeleteResult(BaseModel):
    """Outcome of a file store deletion."""

    chunks_deleted: int = Field(default=0, ge=0)
    message: str = ""
