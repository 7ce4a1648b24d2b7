"""Pytest fixtures and shared test configuration.

Fixtures:
    - client_config: Deterministic client configuration
    - bus: Fresh event bus
    - recorder: Bus subscriber capturing every stream event
    - stream_request: A typical study-material question
"""

import pytest

from tests.helpers import EventRecorder
from wise_owl.client.config import ClientConfig
from wise_owl.models.schemas import SearchMode, StreamRequest
from wise_owl.streaming.bus import EventBus


@pytest.fixture
def client_config() -> ClientConfig:
    """Return configuration pointing at a fake answer service."""
    return ClientConfig(
        base_url="http://answers.test",
        default_results=5,
        timeout=5.0,
        user_id="fp_test",
        auth_token=None,
    )


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(bus: EventBus) -> EventRecorder:
    return EventRecorder(bus)


@pytest.fixture
def stream_request() -> StreamRequest:
    """Return a typical question restricted to one document."""
    return StreamRequest(
        message="What is osmosis?",
        n_results=5,
        search_mode=SearchMode.STUDY_MATERIAL,
        pdf_names={"biology.pdf"},
    )
