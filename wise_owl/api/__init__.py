"""FastAPI host for the chat front-end.

Endpoints:
    - GET /health: Service health status
    - GET /: NiceGUI chat page (mounted by wise_owl.main)
"""

from wise_owl.api.app import app, create_app

__all__ = ["app", "create_app"]
