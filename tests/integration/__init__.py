"""Integration tests for components working together.

Coverage:
    - Streaming engine over scripted chunked HTTP bodies
    - Turn coordinators sharing one bus
    - File store client requests and error mapping
    - FastAPI host routes

HTTP traffic is served in-process by httpx transports. No answer service
is required.
"""
