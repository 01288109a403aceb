"""
HTTP transports for Mobcraft Storage SDK.

A transport executes one ApiRequest and returns the completed response as a
RawResponse. It makes exactly one attempt: there is no retry and no backoff.
Connection-level failures (DNS, refused connection, timeout, malformed HTTP)
are re-raised as NetworkError; HTTP error statuses are returned untouched
for the decoder to map.

Transport is built on requests for the synchronous client, AsyncTransport on
aiohttp for the asynchronous one. Both hold a pooled session and must be
closed when no longer needed.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

import aiohttp
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from . import __version__
from .exceptions import ErrorKind, make_error
from .request_builder import ApiRequest

logger = logging.getLogger(__name__)

USER_AGENT = f"mobcraft-storage-python/{__version__}"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class RawResponse:
    """A completed HTTP response: status, body bytes and lower-cased headers."""

    status_code: int
    content: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name.lower(), default)


def _lower_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    return {str(key).lower(): str(value) for key, value in headers.items()}


def request_headers(api_key: str, request: ApiRequest) -> Dict[str, str]:
    """Per-request headers; credentials are only attached to API calls."""
    if not request.authenticated:
        return {}
    return {
        "Authorization": f"Bearer {api_key}",
        "Accept": "application/json",
    }


def _log_path(request: ApiRequest) -> str:
    # Signed download URLs carry their token in the query string
    return request.path.split("?", 1)[0]


def _network_error(exc: BaseException, request: ApiRequest):
    logger.debug("HTTP %s %s failed: %s", request.method, _log_path(request), exc)
    message = str(exc) or type(exc).__name__
    return make_error(ErrorKind.NETWORK, message=f"Network error: {message}")


class Transport:
    """
    Synchronous transport backed by a requests.Session.

    The session pools connections and may be shared by several threads
    issuing independent calls.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the transport.

        Args:
            api_key: API key sent as a bearer token
            base_url: Service root, e.g. https://storage.mobcraft.in
            timeout: Request timeout in seconds
            session: Pre-configured session (mainly for tests)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        if session is None:
            session = requests.Session()
            # One attempt per call: retries are left to the caller
            adapter = HTTPAdapter(max_retries=Retry(total=0, read=False))
            session.mount("http://", adapter)
            session.mount("https://", adapter)
            session.headers.update({"User-Agent": USER_AGENT})
        self.session = session

    def send(self, request: ApiRequest) -> RawResponse:
        """Execute a request and return the completed response."""
        url = request.url(self.base_url)
        kwargs = {
            "headers": request_headers(self.api_key, request),
            "timeout": self.timeout,
        }
        if request.params:
            kwargs["params"] = request.params
        if request.file is not None:
            part = request.file
            kwargs["data"] = dict(request.fields)
            kwargs["files"] = {part.field_name: (part.file_name, part.content, part.content_type)}

        start_time = time.monotonic()
        try:
            response = self.session.request(request.method, url, **kwargs)
            content = response.content
        except requests.exceptions.RequestException as e:
            raise _network_error(e, request) from e

        logger.debug(
            "HTTP %s %s -> %s (%.0f ms)",
            request.method, _log_path(request), response.status_code,
            (time.monotonic() - start_time) * 1000,
        )
        return RawResponse(
            status_code=response.status_code,
            content=content or b"",
            headers=_lower_headers(response.headers),
        )

    def close(self):
        """Close pooled connections."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class AsyncTransport:
    """
    Asynchronous transport backed by an aiohttp.ClientSession.

    The session is created on first use and reused by every call, so any
    number of in-flight operations may share one transport.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(limit=100, limit_per_host=30)
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout,
                connector=connector,
            )
        return self._session

    @staticmethod
    def form_data(request: ApiRequest) -> aiohttp.FormData:
        """Render the multipart body of an upload request."""
        form = aiohttp.FormData()
        for key, value in request.fields.items():
            form.add_field(key, value)
        part = request.file
        form.add_field(part.field_name, part.content, filename=part.file_name, content_type=part.content_type)
        return form

    async def send(self, request: ApiRequest) -> RawResponse:
        """Execute a request and return the completed response."""
        session = await self._get_session()
        url = request.url(self.base_url)
        kwargs = {"headers": request_headers(self.api_key, request)}
        if request.params:
            kwargs["params"] = request.params
        if request.file is not None:
            kwargs["data"] = self.form_data(request)

        start_time = time.monotonic()
        try:
            async with session.request(request.method, url, **kwargs) as response:
                content = await response.read()
                status = response.status
                headers = _lower_headers(response.headers)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise _network_error(e, request) from e

        logger.debug(
            "HTTP %s %s -> %s (%.0f ms)",
            request.method, _log_path(request), status,
            (time.monotonic() - start_time) * 1000,
        )
        return RawResponse(status_code=status, content=content or b"", headers=headers)

    async def close(self):
        """Close the client session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
