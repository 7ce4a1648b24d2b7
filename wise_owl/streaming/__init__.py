"""Streaming response ingestion and per-turn event dispatch.

Raw bytes flow one way: framer -> decoder -> accumulator -> bus -> turns.
Control flows the other way: a TurnCoordinator starts a request through the
StreamingEngine and may stop it early.

Responsibilities:
    - Incremental UTF-8 decoding and newline framing of chunked bodies
    - Decoding tagged JSON records into typed events
    - Publishing turn-tagged events to any number of subscribers
    - Single in-flight request lifecycle with cooperative cancellation
"""

from wise_owl.streaming.accumulator import ContentAccumulator
from wise_owl.streaming.bus import EventBus, EventHandler
from wise_owl.streaming.decoder import decode_record
from wise_owl.streaming.engine import EngineState, StreamingEngine
from wise_owl.streaming.framer import LineFramer
from wise_owl.streaming.turn import TurnCoordinator, make_turn_id

__all__ = [
    "ContentAccumulator",
    "EngineState",
    "EventBus",
    "EventHandler",
    "LineFramer",
    "StreamingEngine",
    "TurnCoordinator",
    "decode_record",
    "make_turn_id",
]
