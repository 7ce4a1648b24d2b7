"""Client configuration with environment variable loading.

Pydantic-based configuration for talking to the answer service.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_BASE_URL = "https://studyassistant-production.up.railway.app"


class ClientConfig(BaseModel):
    """Configuration for the streaming engine and file store client.

    Attributes:
        base_url: Answer service base URL, without trailing slash.
        default_results: Context passages requested per question.
        timeout: Connect/write/pool timeout in seconds. Reads never time out.
        user_id: Stable user identifier sent as the ``user-id`` header.
        auth_token: Bearer token, when the user is signed in.
        extra_headers: Additional headers sent with every request.
    """

    # Environment values arrive through default factories
    model_config = ConfigDict(validate_default=True)

    base_url: str = Field(
        default_factory=lambda: os.getenv("API_BASE_URL", DEFAULT_BASE_URL),
        description="Answer service base URL",
    )
    default_results: int = Field(
        default_factory=lambda: int(os.getenv("API_DEFAULT_RESULTS", "5")),
        ge=1,
        le=50,
        description="Number of context passages requested per question",
    )
    timeout: float = Field(
        default_factory=lambda: float(os.getenv("API_TIMEOUT", "30")),
        gt=0.0,
        description="Connect/write/pool timeout in seconds",
    )
    user_id: str | None = Field(
        default_factory=lambda: os.getenv("WISE_OWL_USER_ID") or None,
        description="Stable user identifier",
    )
    auth_token: str | None = Field(
        default_factory=lambda: os.getenv("AUTH_TOKEN") or None,
        description="Bearer token for signed-in users",
    )
    extra_headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("API_BASE_URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("auth_token")
    @classmethod
    def strip_auth_token(cls, v: str | None) -> str | None:
        """Treat blank tokens as anonymous use."""
        if v is None or not v.strip():
            return None
        return v.strip()

    def request_headers(self) -> dict[str, str]:
        """Headers attached to every outbound request."""
        headers = {
            "accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.user_id:
            headers["user-id"] = self.user_id
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        headers.update(self.extra_headers)
        return headers


def get_client_config() -> ClientConfig:
    """Create client configuration from environment.

    Returns:
        Configured ClientConfig instance.

    Raises:
        ValueError: If an environment value is invalid.
    """
    return ClientConfig()
