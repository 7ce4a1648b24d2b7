"""File store client for the documents a user studies from.

Lists, uploads and deletes PDFs held by the answer service.
"""

import logging
from pathlib import Path
from urllib.parse import quote

import httpx

from wise_owl.client.config import ClientConfig, get_client_config
from wise_owl.models.schemas import DeleteResult, FileListResponse

logger = logging.getLogger(__name__)

FILES_ENDPOINT = "/upload/files/"
UPLOAD_ENDPOINT = "/upload/"
DELETE_ALL_ENDPOINT = "/upload/files/all"
PDF_MIME_TYPE = "application/pdf"


class FileStoreError(Exception):
    """Raised when a file store request fails or a file is rejected."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _validate_upload(path: Path) -> None:
    """Accept only non-empty PDF files.

    Raises:
        FileStoreError: If the file is missing, empty or not a PDF.
    """
    if path.suffix.lower() != ".pdf":
        raise FileStoreError(f"Only PDF files are accepted: {path.name}")
    if not path.is_file():
        raise FileStoreError(f"File not found: {path}")
    if path.stat().st_size == 0:
        raise FileStoreError(f"File is empty: {path.name}")


class FileStoreClient:
    """Thin async client over the answer service's upload endpoints.

    Args:
        config: Client configuration. Loads from environment if not provided.
        client: Optional HTTP client, mainly for tests.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or get_client_config()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self._config.timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        url = f"{self._config.base_url}{endpoint}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"File store request {method} {endpoint} failed: {e!r}")
            raise FileStoreError(f"Connection failed: {e}") from e

        if response.is_error:
            message = f"API request failed with status {response.status_code}"
            try:
                message = f"API request failed: {response.json()}"
            except ValueError:
                logger.debug("Could not parse error response body")
            logger.error(message)
            raise FileStoreError(message, status_code=response.status_code)
        return response

    async def list_files(self, user_id: str | None = None) -> list[str]:
        """Return the names of the documents stored for a user."""
        headers = self._config.request_headers()
        if user_id:
            headers["user-id"] = user_id
        response = await self._request("GET", FILES_ENDPOINT, headers=headers)
        return FileListResponse.model_validate(response.json()).file_names

    async def upload(self, paths: list[Path]) -> None:
        """Upload PDF files in a single multipart request.

        Raises:
            FileStoreError: If any file is rejected or the upload fails.
        """
        for path in paths:
            _validate_upload(path)

        # Let httpx set the multipart Content-Type
        headers = {
            k: v for k, v in self._config.request_headers().items() if k != "Content-Type"
        }
        files = [("files", (p.name, p.read_bytes(), PDF_MIME_TYPE)) for p in paths]
        await self._request("POST", UPLOAD_ENDPOINT, files=files, headers=headers)
        logger.info(f"Uploaded {len(paths)} file(s)")

    async def delete(self, name: str) -> DeleteResult:
        """Delete one document and its indexed chunks."""
        endpoint = f"{FILES_ENDPOINT}{quote(name, safe='')}"
        response = await self._request(
            "DELETE", endpoint, headers=self._config.request_headers()
        )
        result = DeleteResult.model_validate(response.json())
        logger.info(f"Deleted {name}: {result.chunks_deleted} chunks")
        return result

    async def delete_all(self) -> DeleteResult:
        """Delete every document the user has uploaded."""
        response = await self._request(
            "DELETE", DELETE_ALL_ENDPOINT, headers=self._config.request_headers()
        )
        return DeleteResult.model_validate(response.json())
