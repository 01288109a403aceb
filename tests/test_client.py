"""Unit tests for the synchronous client"""

import io

import pytest

from mobcraft_storage import MobcraftStorage
from mobcraft_storage.exceptions import (
    AuthenticationError,
    FileSizeLimitError,
    MalformedPayloadError,
    MobcraftError,
    NetworkError,
    QuotaExceededError,
    ServerError,
    StorageFileNotFoundError,
)
from mobcraft_storage.models import FileRecord, Page
from mobcraft_storage.transport import RawResponse

from conftest import API_KEY, BASE_URL, FILE_JSON, json_response

UPLOAD_JSON = {
    "fileId": "file2",
    "fileName": "doc.pdf",
    "fileSize": 8,
    "mimeType": "application/pdf",
    "downloadUrl": "https://cdn.mobcraft.in/file2",
    "folder": "/reports",
    "createdAt": "2024-03-01T12:00:00Z",
}


def file_json(index):
    return dict(FILE_JSON, id=f"file{index}", fileName=f"f{index}.png")


def page_response(ids, total, limit, offset, has_more):
    return json_response(200, {"data": {
        "items": [file_json(i) for i in ids],
        "total": total,
        "limit": limit,
        "offset": offset,
        "hasMore": has_more,
    }})


@pytest.fixture
def storage(fake_transport):
    return MobcraftStorage(api_key=API_KEY, base_url=BASE_URL, transport=fake_transport)


class TestConstruction:
    def test_missing_api_key_raises(self):
        with pytest.raises(AuthenticationError):
            MobcraftStorage()

    def test_api_key_from_env(self, monkeypatch, fake_transport):
        monkeypatch.setenv("MOBCRAFT_API_KEY", "env_key")

        storage = MobcraftStorage(transport=fake_transport)

        assert storage.config.api_key == "env_key"
        assert storage.base_url == "https://storage.mobcraft.in"

    def test_trailing_slash_is_stripped(self, fake_transport):
        storage = MobcraftStorage(api_key=API_KEY, base_url=BASE_URL + "/", transport=fake_transport)

        assert storage.base_url == BASE_URL

    def test_default_transport_uses_config(self):
        storage = MobcraftStorage(api_key=API_KEY, base_url=BASE_URL, timeout=12)

        assert storage.transport.api_key == API_KEY
        assert storage.transport.base_url == BASE_URL
        assert storage.transport.timeout == 12.0
        storage.close()

    def test_context_manager_closes_transport(self, fake_transport):
        with MobcraftStorage(api_key=API_KEY, transport=fake_transport) as storage:
            storage.get_quota()

        assert fake_transport.closed


class TestQuotaOperations:
    def test_get_quota(self, storage, fake_transport):
        quota = storage.get_quota()

        assert quota.tier == "free"
        assert quota.storage_used == 1024
        assert quota.is_almost_full is False
        assert fake_transport.last_request.path == "/api/v1/quota"

    def test_get_usage_breakdown(self, storage):
        breakdown = storage.get_usage_breakdown()

        assert breakdown.total_files == 500
        assert breakdown.categories["images"].count == 300
        assert breakdown.categories["documents"].percentage == 20.0

    def test_get_tiers(self, storage):
        tiers = storage.get_tiers()

        assert len(tiers) == 1
        assert tiers[0].id == "free"
        assert tiers[0].name == "FREE"
        assert tiers[0].is_free
        assert tiers[0].is_current


class TestFileOperations:
    def test_get_file(self, storage):
        record = storage.get_file("file1")

        assert isinstance(record, FileRecord)
        assert record.file_name == "test.png"
        assert record.folder == "/"

    def test_get_missing_file_raises(self, storage):
        with pytest.raises(StorageFileNotFoundError) as exc_info:
            storage.get_file("notfound")

        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "FILE_NOT_FOUND"
        assert exc_info.value.message == "File not found"

    def test_delete_file_returns_none_on_204(self, storage, fake_transport):
        assert storage.delete_file("file1") is None
        assert fake_transport.last_request.method == "DELETE"

    def test_delete_missing_file_raises(self, storage):
        # Unregistered routes answer 404 with a non-JSON body
        with pytest.raises(StorageFileNotFoundError) as exc_info:
            storage.delete_file("ghost")

        assert exc_info.value.message == "An error occurred"

    def test_list_files(self, storage, fake_transport):
        page = storage.list_files(folder="images", limit=20)

        assert isinstance(page, Page)
        assert page.total == 1
        assert page.items[0].id == "file1"
        assert not page.has_more
        assert fake_transport.last_request.params["folder"] == "/images"

    def test_iter_files_walks_every_page(self, storage, fake_transport):
        responses = iter([
            page_response([1, 2], total=5, limit=2, offset=0, has_more=True),
            page_response([3, 4], total=5, limit=2, offset=2, has_more=True),
            page_response([5], total=5, limit=2, offset=4, has_more=False),
        ])
        fake_transport.send = lambda request: fake_transport.requests.append(request) or next(responses)

        ids = [record.id for record in storage.iter_files(page_size=2)]

        assert ids == ["file1", "file2", "file3", "file4", "file5"]
        assert [r.params["offset"] for r in fake_transport.requests] == ["0", "2", "4"]

    def test_iter_files_stops_on_empty_page(self, storage, fake_transport):
        fake_transport.add("GET", "/api/v1/files", page_response([], total=3, limit=20, offset=0, has_more=True))

        assert list(storage.iter_files()) == []
        assert len(fake_transport.requests) == 1


class TestUpload:
    def test_upload_bytes(self, storage, fake_transport):
        fake_transport.add("POST", "/api/v1/files", json_response(201, {"data": UPLOAD_JSON}))

        outcome = storage.upload_bytes(b"%PDF-1.4", "doc.pdf", folder="reports", metadata={"k": "v"})

        assert outcome.file_id == "file2"
        assert outcome.download_url == "https://cdn.mobcraft.in/file2"

        request = fake_transport.last_request
        assert request.is_multipart
        assert request.file.field_name == "file"
        assert request.file.file_name == "doc.pdf"
        assert request.file.content_type == "application/pdf"
        assert request.fields["folder"] == "/reports"

    def test_upload_file_uses_object_name(self, storage, fake_transport, tmp_path):
        fake_transport.add("POST", "/api/v1/files", json_response(201, {"data": UPLOAD_JSON}))
        path = tmp_path / "doc.pdf"
        path.write_bytes(b"%PDF-1.4")

        with open(path, "rb") as f:
            storage.upload_file(f)

        assert fake_transport.last_request.file.file_name == "doc.pdf"
        assert fake_transport.last_request.file.content == b"%PDF-1.4"

    def test_upload_anonymous_stream_requires_name(self, storage):
        with pytest.raises(ValueError):
            storage.upload_file(io.BytesIO(b"data"))

    def test_quota_exceeded(self, storage, fake_transport):
        fake_transport.add("POST", "/api/v1/files", json_response(
            413, {"message": "Storage quota exceeded", "code": "QUOTA_EXCEEDED"},
        ))

        with pytest.raises(QuotaExceededError) as exc_info:
            storage.upload_bytes(b"x", "a.txt")

        assert exc_info.value.status_code == 413

    def test_file_too_large(self, storage, fake_transport):
        fake_transport.add("POST", "/api/v1/files", json_response(
            413, {"message": "File too large", "code": "FILE_TOO_LARGE"},
        ))

        with pytest.raises(FileSizeLimitError):
            storage.upload_bytes(b"x", "a.txt")


class TestDownload:
    def test_download_is_two_steps(self, storage, fake_transport):
        signed_url = "https://cdn.mobcraft.in/file1?sig=abc"
        fake_transport.add("GET", "/api/v1/files/file1/download-url", json_response(200, {"data": {"url": signed_url}}))
        fake_transport.add("GET", signed_url, RawResponse(status_code=200, content=b"file bytes"))

        content = storage.download_file("file1")

        assert content == b"file bytes"
        first, second = fake_transport.requests
        assert first.authenticated
        assert second.path == signed_url
        assert not second.authenticated

    def test_signed_url_failure_is_network_error(self, storage, fake_transport):
        signed_url = "https://cdn.mobcraft.in/file1?sig=expired"
        fake_transport.add("GET", "/api/v1/files/file1/download-url", json_response(200, {"data": {"url": signed_url}}))
        fake_transport.add("GET", signed_url, RawResponse(status_code=403, content=b"expired"))

        with pytest.raises(NetworkError) as exc_info:
            storage.download_file("file1")

        assert "403" in exc_info.value.message

    def test_get_download_url(self, storage, fake_transport):
        fake_transport.add("GET", "/api/v1/files/file1/download-url", json_response(200, {"data": {"url": "https://x/y"}}))

        assert storage.get_download_url("file1") == "https://x/y"


class TestErrors:
    def test_invalid_api_key(self, storage, fake_transport):
        fake_transport.add("GET", "/api/v1/quota", json_response(401, {"message": "Invalid API key", "code": "INVALID_API_KEY"}))

        with pytest.raises(AuthenticationError) as exc_info:
            storage.get_quota()

        assert exc_info.value.message == "Invalid API key"

    def test_server_error(self, storage, fake_transport):
        fake_transport.add("GET", "/api/v1/tiers", json_response(502, {"message": "Bad gateway"}))

        with pytest.raises(ServerError) as exc_info:
            storage.get_tiers()

        assert exc_info.value.status_code == 502

    def test_network_errors_propagate(self, storage, fake_transport):
        fake_transport.add("GET", "/api/v1/quota", NetworkError("Network error: Connection refused"))

        with pytest.raises(NetworkError):
            storage.get_quota()

    def test_malformed_payload(self, storage, fake_transport):
        fake_transport.add("GET", "/api/v1/quota", json_response(200, {"data": {"tier": "free"}}))

        with pytest.raises(MalformedPayloadError):
            storage.get_quota()

    def test_every_failure_is_a_mobcraft_error(self, storage, fake_transport):
        fake_transport.add("GET", "/api/v1/quota", json_response(418, {"message": "teapot", "code": "TEAPOT"}))

        with pytest.raises(MobcraftError) as exc_info:
            storage.get_quota()

        assert exc_info.value.status_code == 418
