"""Outbound collaborators of the chat front-end.

Responsibilities:
    - Client configuration loaded from the environment
    - File store calls for listing, uploading and deleting PDFs
    - Stable per-device user id attached to outbound requests
"""

from wise_owl.client.config import ClientConfig, get_client_config
from wise_owl.client.files import FileStoreClient, FileStoreError
from wise_owl.client.identity import get_stable_user_id

__all__ = [
    "ClientConfig",
    "FileStoreClient",
    "FileStoreError",
    "get_client_config",
    "get_stable_user_id",
]
