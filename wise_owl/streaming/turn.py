"""Per-turn consumer of the shared event bus.

A TurnCoordinator is created for every question the user asks. It starts the
request, keeps only the events carrying its own turn id, and reduces them
into the answer shown for that turn.
"""

import itertools
import logging
import time
from collections.abc import Callable
from typing import Any

from wise_owl.models import ChatMessage, SourceInfo, source_from_metadata
from wise_owl.models.schemas import (
    ChunkEvent,
    CompleteEvent,
    ErrorEvent,
    EventName,
    ResponseEvent,
    StreamRequest,
)
from wise_owl.streaming.engine import StreamingEngine

logger = logging.getLogger(__name__)

ENGINE_BUSY_MESSAGE = "Another answer is still streaming"

_turn_counter = itertools.count(1)


def make_turn_id(message_id: str) -> str:
    """Build a process-unique turn id for a user message."""
    return f"message-{message_id}-{time.time_ns()}-{next(_turn_counter)}"


def _sources_from(metadata: Any) -> list[SourceInfo]:
    records = metadata.get("sources") if isinstance(metadata, dict) else metadata
    if not isinstance(records, list):
        return []
    return [source_from_metadata(record) for record in records if isinstance(record, dict)]


class TurnCoordinator:
    """Stream one answer and surface it to its owner exactly once.

    Attributes:
        turn_id: Id the engine tags this turn's events with.
        answer: Running answer text.
        error: Error message, once the turn has failed.
        is_loading: Whether the answer is still streaming.
        metadata: Completion metadata, once the turn has completed.
    """

    def __init__(
        self,
        engine: StreamingEngine,
        message_id: str,
        request: StreamRequest,
        on_update: Callable[[str], None] | None = None,
        on_answer: Callable[[ChatMessage], None] | None = None,
        on_error: Callable[[str], None] | None = None,
    ) -> None:
        self._engine = engine
        self._bus = engine.bus
        self._message_id = message_id
        self._request = request
        self._on_update = on_update
        self._on_answer = on_answer
        self._on_error = on_error

        self.turn_id = make_turn_id(message_id)
        self.answer = ""
        self.error: str | None = None
        self.is_loading = False
        self.metadata: Any = None
        self.bot_message: ChatMessage | None = None

        self._started = False
        self._notified = False
        self._error_reported = False
        self._subscribed = False
        self._subscribe()

    @property
    def started(self) -> bool:
        return self._started

    async def run(self) -> None:
        """Start the request for this turn. Later calls do nothing."""
        if self._started:
            return
        self._started = True
        self.is_loading = True
        self.error = None
        self.answer = ""

        accepted = await self._engine.start(self._request, self.turn_id)
        if not accepted:
            self._fail(ENGINE_BUSY_MESSAGE)

    def teardown(self) -> None:
        """Cancel this turn's stream, if still running, and stop listening."""
        self._engine.stop(self.turn_id)
        self.is_loading = False
        self._unsubscribe()

    def _subscribe(self) -> None:
        self._bus.subscribe(EventName.CHUNK, self._handle_chunk)
        self._bus.subscribe(EventName.RESPONSE, self._handle_response)
        self._bus.subscribe(EventName.ERROR, self._handle_error)
        self._bus.subscribe(EventName.COMPLETE, self._handle_complete)
        self._subscribed = True

    def _unsubscribe(self) -> None:
        if not self._subscribed:
            return
        self._bus.unsubscribe(EventName.CHUNK, self._handle_chunk)
        self._bus.unsubscribe(EventName.RESPONSE, self._handle_response)
        self._bus.unsubscribe(EventName.ERROR, self._handle_error)
        self._bus.unsubscribe(EventName.COMPLETE, self._handle_complete)
        self._subscribed = False

    def _handle_chunk(self, event: ChunkEvent) -> None:
        if event.turn_id != self.turn_id:
            return
        self.answer += event.content

    def _handle_response(self, event: ResponseEvent) -> None:
        if event.turn_id != self.turn_id:
            return
        # The cumulative text is authoritative over locally appended chunks
        self.answer = event.content
        self._emit_update()

    def _handle_error(self, event: ErrorEvent) -> None:
        if event.turn_id != self.turn_id:
            return
        self._fail(event.message)

    def _handle_complete(self, event: CompleteEvent) -> None:
        if event.turn_id != self.turn_id:
            return
        self.metadata = event.metadata
        self.is_loading = False
        logger.info(f"Turn {self.turn_id} completed with {len(self.answer)} characters")
        self._unsubscribe()
        self._notify_answer()

    def _fail(self, message: str) -> None:
        self.error = message
        self.is_loading = False
        self._unsubscribe()
        if not self._error_reported:
            self._error_reported = True
            if self._on_error:
                self._on_error(message)
        # Partial answers stay visible
        self._notify_answer()

    def _emit_update(self) -> None:
        if self._on_update:
            self._on_update(self.answer)

    def _notify_answer(self) -> None:
        if self._notified or not self.answer:
            return
        self._notified = True
        self.bot_message = ChatMessage(
            id=f"{self._message_id}-bot-{time.time_ns()}",
            role="bot",
            content=self.answer,
            sources=_sources_from(self.metadata),
        )
        if self._on_answer:
            self._on_answer(self.bot_message)
