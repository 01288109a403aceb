"""Pytest configuration and shared fixtures"""

import json
import os
from typing import Any, Dict, Generator, Optional, Tuple, Union

import pytest

from mobcraft_storage.request_builder import ApiRequest
from mobcraft_storage.transport import RawResponse

BASE_URL = "https://test.mobcraft.in"
API_KEY = "test_api_key"

Route = Union[RawResponse, Exception]


def json_response(status: int, body: Any, headers: Optional[Dict[str, str]] = None) -> RawResponse:
    """Build a RawResponse carrying a JSON body"""
    all_headers = {"content-type": "application/json"}
    all_headers.update({k.lower(): v for k, v in (headers or {}).items()})
    return RawResponse(status_code=status, content=json.dumps(body).encode("utf-8"), headers=all_headers)


class FakeTransport:
    """In-memory transport double: records requests, replays canned responses"""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Route] = {}
        self.requests = []
        self.closed = False

    def add(self, method: str, path: str, result: Route) -> "FakeTransport":
        self.routes[(method, path)] = result
        return self

    def respond(self, request: ApiRequest) -> RawResponse:
        self.requests.append(request)
        result = self.routes.get((request.method, request.path))
        if result is None:
            return RawResponse(status_code=404, content=b"Not found")
        if isinstance(result, Exception):
            raise result
        return result

    def send(self, request: ApiRequest) -> RawResponse:
        return self.respond(request)

    def close(self):
        self.closed = True

    @property
    def last_request(self) -> ApiRequest:
        return self.requests[-1]


class AsyncFakeTransport(FakeTransport):
    """Async flavour of FakeTransport"""

    async def send(self, request: ApiRequest) -> RawResponse:
        return self.respond(request)

    async def close(self):
        self.closed = True


FILE_JSON = {
    "id": "file1",
    "fileName": "test.png",
    "fileSize": 1024,
    "mimeType": "image/png",
    "folder": "/",
    "createdAt": "2024-01-01T00:00:00.000Z",
}

QUOTA_JSON = {
    "tier": "free",
    "storageUsed": 1024,
    "storageLimit": 1073741824,
    "storageUsedFormatted": "1 KB",
    "storageLimitFormatted": "1 GB",
    "storagePercentage": 0,
    "filesCount": 1,
    "fileSizeLimit": 26214400,
    "fileSizeLimitFormatted": "25 MB",
    "features": ["basic_storage"],
}

TIER_JSON = {
    "id": "free",
    "storageLimit": 1073741824,
    "fileSizeLimit": 26214400,
    "price": 0,
    "features": ["basic_storage"],
    "isPopular": False,
    "isCurrent": True,
}

BREAKDOWN_JSON = {
    "totalSize": 10737418240,
    "totalSizeFormatted": "10 GB",
    "totalFiles": 500,
    "categories": {
        "images": {"size": 5368709120, "sizeFormatted": "5 GB", "count": 300, "percentage": 50.0},
        "documents": {"size": 2147483648, "sizeFormatted": "2 GB", "count": 100, "percentage": 20},
    },
}


def api_routes(transport: FakeTransport) -> FakeTransport:
    """Register the standard happy-path API routes"""
    transport.add("GET", "/api/v1/quota", json_response(200, {"data": QUOTA_JSON}))
    transport.add("GET", "/api/v1/quota/breakdown", json_response(200, {"data": BREAKDOWN_JSON}))
    transport.add("GET", "/api/v1/tiers", json_response(200, {"data": [TIER_JSON]}))
    transport.add("GET", "/api/v1/files/file1", json_response(200, {"data": FILE_JSON}))
    transport.add(
        "GET",
        "/api/v1/files",
        json_response(200, {"data": {"items": [FILE_JSON], "total": 1, "limit": 20, "offset": 0, "hasMore": False}}),
    )
    transport.add("DELETE", "/api/v1/files/file1", RawResponse(status_code=204))
    transport.add(
        "GET",
        "/api/v1/files/notfound",
        json_response(404, {"message": "File not found", "code": "FILE_NOT_FOUND"}),
    )
    return transport


@pytest.fixture(autouse=True)
def reset_env_vars() -> Generator[None, None, None]:
    """Reset environment variables before each test"""
    original_env = os.environ.copy()

    for var in ("MOBCRAFT_API_KEY", "MOBCRAFT_BASE_URL", "MOBCRAFT_TIMEOUT"):
        os.environ.pop(var, None)

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def fake_transport() -> FakeTransport:
    """Fake transport with the standard API routes"""
    return api_routes(FakeTransport())


@pytest.fixture
def async_fake_transport() -> AsyncFakeTransport:
    """Async fake transport with the standard API routes"""
    return api_routes(AsyncFakeTransport())
