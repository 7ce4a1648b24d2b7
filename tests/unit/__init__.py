"""Unit tests for individual components in isolation.

Coverage:
    - streaming/: Framing, record decoding, accumulation, event bus
    - client/: Configuration and identity caching
    - models/: Request validation and source mapping
"""
