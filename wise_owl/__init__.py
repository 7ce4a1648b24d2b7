"""Wise Owl - study assistant chat front-end with streamed answers.

Submits questions to a remote answer service and renders each answer as it
arrives, one conversational turn at a time.

Components:
    - streaming: Response ingestion, event bus and per-turn coordination
    - client: Configuration, file store and user identity collaborators
    - models: Request, event and message schemas
    - ui: NiceGUI chat page
    - api: FastAPI host for the UI
"""

__version__ = "0.1.0"
