"""NiceGUI interface - thin presentation layer for chat turns.

Responsibilities:
    - Chat message display with streamed answers
    - Search mode toggle and document filter
    - Stop button cancelling the answer in flight

Contains minimal business logic. Streaming is delegated to wise_owl.streaming.
"""
