"""Test package for the Wise Owl chat front-end.

Structure:
    - unit/: Framing, decoding, bus, configuration and model tests
    - integration/: Engine and turn behaviour over scripted HTTP streams

Network traffic is served by httpx.MockTransport with scripted chunked
bodies, so no answer service is needed. Uses pytest-check for soft
assertions.
"""
