"""Scripted HTTP bodies for exercising the streaming engine."""

import asyncio
import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx

# A body item is either bytes to send, an Event to wait on, or an exception to raise
BodyItem = bytes | asyncio.Event | BaseException


def record(payload: Any, marker: str = "data: ") -> bytes:
    """Encode one wire record."""
    return f"{marker}{json.dumps(payload)}\n".encode()


def chunk(content: str, **extra: Any) -> bytes:
    return record({"type": "chunk", "content": content, **extra})


def complete(metadata: Any = None) -> bytes:
    return record({"type": "complete", "metadata": {} if metadata is None else metadata})


async def _iterate(items: list[BodyItem]) -> AsyncIterator[bytes]:
    for item in items:
        if isinstance(item, asyncio.Event):
            await item.wait()
            continue
        if isinstance(item, BaseException):
            raise item
        yield item
        await asyncio.sleep(0)


def scripted_client(
    *bodies: list[BodyItem],
    status_code: int = 200,
    requests: list[httpx.Request] | None = None,
    on_request: Callable[[httpx.Request], None] | None = None,
) -> httpx.AsyncClient:
    """HTTP client answering successive requests with successive bodies."""
    remaining = list(bodies)

    async def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        if on_request is not None:
            on_request(request)
        items = remaining.pop(0) if remaining else []
        return httpx.Response(status_code, content=_iterate(items))

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class EventRecorder:
    """Bus subscriber collecting (name, event) pairs for every stream event."""

    NAMES = ("chunk", "response", "error", "complete")

    def __init__(self, bus) -> None:
        self.events: list[tuple[str, Any]] = []
        self.first_chunk = asyncio.Event()
        for name in self.NAMES:
            bus.subscribe(name, self._handler(name))

    def _handler(self, name: str) -> Callable[[Any], None]:
        def handle(event: Any) -> None:
            self.events.append((name, event))
            if name == "chunk":
                self.first_chunk.set()

        return handle

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def of(self, name: str) -> list[Any]:
        return [event for n, event in self.events if n == name]

    def summary(self) -> list[tuple[str, Any]]:
        """Events reduced to (name, content / message / metadata)."""
        result = []
        for name, event in self.events:
            if name in ("chunk", "response"):
                result.append((name, event.content))
            elif name == "error":
                result.append((name, event.message))
            else:
                result.append((name, event.metadata))
        return result
