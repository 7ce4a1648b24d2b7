"""Streaming engine: one POST request in, typed per-turn events out.

Reads the chunked response body of ``/chat/stream``, frames it into lines,
decodes each line and publishes the resulting events on an EventBus tagged
with the caller's turn id.

Lifecycle:
    IDLE -> REQUESTING -> STREAMING -> IDLE

Guarantees per accepted ``start``:
    - ``chunk``/``response`` events are published in wire order.
    - Exactly one terminal event (``error`` or ``complete``) follows them,
      unless the request is stopped first, in which case none is published.
    - State is back to IDLE before the terminal event is published, so a
      terminal handler may schedule the next request.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from types import TracebackType

import httpx

from wise_owl.client.config import ClientConfig, get_client_config
from wise_owl.models.schemas import (
    ChunkEvent,
    CompleteEvent,
    ErrorEvent,
    EventName,
    ResponseEvent,
    StreamEvent,
    StreamRequest,
)
from wise_owl.streaming.accumulator import ContentAccumulator
from wise_owl.streaming.bus import EventBus
from wise_owl.streaming.decoder import decode_record
from wise_owl.streaming.framer import LineFramer

logger = logging.getLogger(__name__)

STREAM_ENDPOINT = "/chat/stream"


class EngineState(str, Enum):
    """Lifecycle state of a StreamingEngine."""

    IDLE = "idle"
    REQUESTING = "requesting"
    STREAMING = "streaming"


@dataclass
class _InFlight:
    """Bookkeeping for the single request an engine may have open."""

    turn_id: str
    stopped: bool = False
    task: asyncio.Task[None] | None = field(default=None, repr=False)


class StreamingEngine:
    """Owns at most one in-flight streaming request.

    The engine is constructed explicitly and handed to whatever composes
    turns; it is not a process-wide singleton.

    Args:
        bus: Bus the events are published on.
        config: Client configuration. Loads from environment if not provided.
        client: Optional HTTP client. When omitted the engine creates one and
            closes it in ``aclose``.
    """

    def __init__(
        self,
        bus: EventBus,
        config: ClientConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._bus = bus
        self._config = config or get_client_config()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self._config.timeout, read=None),
        )
        self._accumulator = ContentAccumulator()
        self._state = EngineState.IDLE
        self._active: _InFlight | None = None

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def accumulated_content(self) -> str:
        """Answer text accumulated for the current or most recent request."""
        return self._accumulator.current()

    def is_streaming(self) -> bool:
        return self._state is not EngineState.IDLE

    def update_user_id(self, user_id: str) -> None:
        """Send a different ``user-id`` header on later requests."""
        self._config = self._config.model_copy(update={"user_id": user_id})

    def update_base_url(self, base_url: str) -> None:
        """Point later requests at another service URL."""
        self._config = self._config.model_validate(
            {**self._config.model_dump(), "base_url": base_url}
        )

    async def start(self, request: StreamRequest, turn_id: str) -> bool:
        """Send a request and publish its events until a terminal event or stop.

        Args:
            request: The question to submit.
            turn_id: Opaque id attached to every event of this request.

        Returns:
            False if another request was already in flight, True otherwise.
        """
        if self._active is not None:
            logger.warning(
                f"Stream already in progress for turn {self._active.turn_id}; "
                f"ignoring start for turn {turn_id}"
            )
            return False

        flight = _InFlight(turn_id=turn_id)
        self._active = flight
        self._state = EngineState.REQUESTING
        self._accumulator.reset()
        logger.info(f"Starting stream for turn {turn_id}")

        flight.task = asyncio.create_task(self._consume(flight, request))
        try:
            await flight.task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if not flight.stopped or (current is not None and current.cancelling()):
                raise
            logger.info(f"Stream for turn {turn_id} stopped")
        finally:
            if self._active is flight:
                # Caller was cancelled without going through stop()
                self._release(flight)
                if not flight.task.done():
                    flight.task.cancel()
        return True

    def stop(self, turn_id: str | None = None) -> None:
        """Cancel the in-flight request without publishing a terminal event.

        Args:
            turn_id: When given, only stop if this turn owns the request.
        """
        flight = self._active
        if flight is None:
            return
        if turn_id is not None and flight.turn_id != turn_id:
            logger.debug(f"Ignoring stop for turn {turn_id}; {flight.turn_id} is streaming")
            return

        self._release(flight)
        self._accumulator.reset()
        if flight.task is not None and not flight.task.done():
            flight.task.cancel()

    async def aclose(self) -> None:
        """Stop any stream and close the HTTP client if the engine created it."""
        self.stop()
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "StreamingEngine":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def _release(self, flight: _InFlight) -> None:
        flight.stopped = True
        if self._active is flight:
            self._active = None
            self._state = EngineState.IDLE

    async def _consume(self, flight: _InFlight, request: StreamRequest) -> None:
        """Run one request from connect to terminal event."""
        framer = LineFramer()
        url = f"{self._config.base_url}{STREAM_ENDPOINT}"

        try:
            async with self._client.stream(
                "POST",
                url,
                json=request.to_payload(),
                headers=self._config.request_headers(),
            ) as response:
                response.raise_for_status()
                if flight.stopped:
                    return
                self._state = EngineState.STREAMING

                async for data in response.aiter_bytes():
                    for record in framer.feed(data):
                        if self._dispatch(flight, record):
                            return

                tail = framer.flush()
                if tail is not None and self._dispatch(flight, tail):
                    return
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Stream request for turn {flight.turn_id} failed with HTTP {status}")
            self._finish(
                flight,
                EventName.ERROR,
                ErrorEvent(message=f"HTTP {status}", details={"status_code": status}),
            )
            return
        except httpx.HTTPError as e:
            logger.error(f"Stream transport failure for turn {flight.turn_id}: {e!r}")
            self._finish(flight, EventName.ERROR, ErrorEvent(message=f"Connection failed: {e}"))
            return
        except Exception as e:
            logger.exception(f"Stream processing error for turn {flight.turn_id}")
            self._finish(
                flight, EventName.ERROR, ErrorEvent(message=f"Stream processing error: {e}")
            )
            return

        logger.info(f"Stream for turn {flight.turn_id} ended without a complete record")
        self._finish(flight, EventName.COMPLETE, CompleteEvent(metadata={}))

    def _dispatch(self, flight: _InFlight, record: str) -> bool:
        """Decode and publish one record. Returns True once the request is over."""
        if flight.stopped:
            return True

        event = decode_record(record)
        if event is None:
            return False

        if isinstance(event, ChunkEvent):
            content = self._accumulator.append(event.content)
            self._publish(flight, EventName.CHUNK, event)
            self._publish(flight, EventName.RESPONSE, ResponseEvent(content=content))
            return flight.stopped

        if isinstance(event, ErrorEvent):
            logger.warning(
                f"Answer service reported an error for turn {flight.turn_id}: {event.message}"
            )
            self._finish(flight, EventName.ERROR, event)
        else:
            self._finish(flight, EventName.COMPLETE, event)
        return True

    def _publish(self, flight: _InFlight, name: EventName, event: StreamEvent) -> None:
        if flight.stopped:
            return
        self._bus.publish(name, event.model_copy(update={"turn_id": flight.turn_id}))

    def _finish(self, flight: _InFlight, name: EventName, event: StreamEvent) -> None:
        if flight.stopped:
            return
        self._release(flight)
        logger.info(f"Stream for turn {flight.turn_id} finished with '{name.value}'")
        self._bus.publish(name, event.model_copy(update={"turn_id": flight.turn_id}))
