"""Integration tests for FileStoreClient over a mock transport."""

from pathlib import Path

import httpx
import pytest
import pytest_check as check

from wise_owl.client.config import ClientConfig
from wise_owl.client.files import FileStoreClient, FileStoreError


class FakeFileStore:
    """In-memory stand-in for the upload endpoints."""

    def __init__(self, files: list[str]) -> None:
        self.files = list(files)
        self.requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "GET" and path == "/upload/files/":
            return httpx.Response(200, json={"file_names": self.files})
        if request.method == "POST" and path == "/upload/":
            return httpx.Response(200, json={"message": "ok"})
        if request.method == "DELETE" and path == "/upload/files/all":
            count = len(self.files)
            self.files.clear()
            return httpx.Response(200, json={"chunks_deleted": count * 10, "message": "deleted"})
        if request.method == "DELETE" and path.startswith("/upload/files/"):
            name = path.removeprefix("/upload/files/")
            if name not in self.files:
                return httpx.Response(404, json={"detail": f"{name} not found"})
            self.files.remove(name)
            return httpx.Response(200, json={"chunks_deleted": 10, "message": f"{name} deleted"})
        return httpx.Response(404)


@pytest.fixture
def store() -> FakeFileStore:
    return FakeFileStore(["biology.pdf", "chemistry notes.pdf"])


@pytest.fixture
async def file_client(store: FakeFileStore, client_config: ClientConfig):
    """FileStoreClient wired to the fake store."""
    http = httpx.AsyncClient(transport=httpx.MockTransport(store.handle))
    yield FileStoreClient(client_config, client=http)
    await http.aclose()


@pytest.fixture
def pdf_file(tmp_path: Path) -> Path:
    path = tmp_path / "notes.pdf"
    path.write_bytes(b"%PDF-1.4\n%fake\n")
    return path


class TestFileStoreClient:
    """Tests for listing, uploading and deleting documents."""

    async def test_list_files(self, file_client: FileStoreClient, store: FakeFileStore) -> None:
        """Listing returns names and sends the user id."""
        names = await file_client.list_files("fp_user")

        check.equal(names, ["biology.pdf", "chemistry notes.pdf"])
        check.equal(store.requests[0].headers["user-id"], "fp_user")

    async def test_upload_sends_multipart(
        self, file_client: FileStoreClient, store: FakeFileStore, pdf_file: Path
    ) -> None:
        """PDFs are uploaded in one multipart request under the files field."""
        await file_client.upload([pdf_file])

        sent = store.requests[0]
        check.is_true(sent.headers["content-type"].startswith("multipart/form-data"))
        check.is_in(b'name="files"; filename="notes.pdf"', sent.content)

    async def test_upload_rejects_non_pdf(
        self, file_client: FileStoreClient, store: FakeFileStore, tmp_path: Path
    ) -> None:
        """Non-PDF files are refused before any request is sent."""
        text_file = tmp_path / "notes.txt"
        text_file.write_text("hello")

        with pytest.raises(FileStoreError, match="Only PDF"):
            await file_client.upload([text_file])

        assert store.requests == []

    async def test_upload_rejects_empty_pdf(
        self, file_client: FileStoreClient, tmp_path: Path
    ) -> None:
        empty = tmp_path / "empty.pdf"
        empty.write_bytes(b"")

        with pytest.raises(FileStoreError, match="empty"):
            await file_client.upload([empty])

    async def test_delete_quotes_name(
        self, file_client: FileStoreClient, store: FakeFileStore
    ) -> None:
        """Names with spaces are URL-quoted and the result is parsed."""
        result = await file_client.delete("chemistry notes.pdf")

        check.equal(result.chunks_deleted, 10)
        check.equal(result.message, "chemistry notes.pdf deleted")
        check.is_in("chemistry%20notes.pdf", str(store.requests[0].url))
        check.equal(store.files, ["biology.pdf"])

    async def test_delete_missing_file_raises(self, file_client: FileStoreClient) -> None:
        """Error responses carry the status and the server's error body."""
        with pytest.raises(FileStoreError) as exc_info:
            await file_client.delete("missing.pdf")

        check.equal(exc_info.value.status_code, 404)
        check.is_in("missing.pdf not found", str(exc_info.value))

    async def test_delete_all(self, file_client: FileStoreClient, store: FakeFileStore) -> None:
        result = await file_client.delete_all()

        check.equal(result.chunks_deleted, 20)
        check.equal(store.files, [])

    async def test_connection_failure(self, client_config: ClientConfig) -> None:
        """Transport failures surface as FileStoreError."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        http = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
        client = FileStoreClient(client_config, client=http)

        with pytest.raises(FileStoreError, match="Connection failed"):
            await client.list_files()

        await http.aclose()

    async def test_error_without_json_body(self, client_config: ClientConfig) -> None:
        http = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(502, text="bad gateway"))
        )
        client = FileStoreClient(client_config, client=http)

        with pytest.raises(FileStoreError, match="status 502"):
            await client.delete_all()

        await http.aclose()
