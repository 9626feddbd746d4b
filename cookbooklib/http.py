from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import json
import logging
import urllib.parse

import httpx

from .exceptions import CookbookRetrievalError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30
MAX_RESPONSE_BYTES = 16 * 1024 * 1024
JSON_MEDIA_TYPE = "application/json"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    url: str
    status_code: int
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


class HttpClient:
    """JSON-speaking session shared by a client and the cookbooks it returns.

    The underlying ``httpx.Client`` pools connections and may be used from
    several threads at once.
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_response_bytes: int = MAX_RESPONSE_BYTES,
        user_agent: str = "cookbooklib/0.1",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.max_response_bytes = max_response_bytes
        self.user_agent = user_agent
        self._session = httpx.Client(
            timeout=httpx.Timeout(timeout_seconds),
            headers={
                "Accept": JSON_MEDIA_TYPE,
                "Content-Type": JSON_MEDIA_TYPE,
                "User-Agent": user_agent,
            },
            follow_redirects=True,
            transport=transport,
        )

    @property
    def closed(self) -> bool:
        return self._session.is_closed

    def get(self, url: str) -> HttpResponse:
        self._validate_url(url)
        logger.debug("GET %s", url)
        try:
            with self._session.stream("GET", url) as response:
                body = self._read_limited(response, url=url)
                status_code = response.status_code
        except httpx.HTTPError as exc:
            raise CookbookRetrievalError(f"Request failed for {url}: {exc}") from exc
        logger.debug("GET %s -> %d (%d bytes)", url, status_code, len(body))
        return HttpResponse(url=url, status_code=status_code, body=body)

    def get_json(self, url: str) -> Any:
        response = self.get(url)
        if response.status_code != httpx.codes.OK:
            raise CookbookRetrievalError(
                f"Unexpected response {response.status_code} from {url}: {response.text}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise CookbookRetrievalError(
                f"Invalid JSON from {url}: {response.text}"
            ) from exc

    def close(self) -> None:
        if not self._session.is_closed:
            self._session.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @staticmethod
    def _validate_url(url: str) -> None:
        parsed = urllib.parse.urlparse(url)
        if parsed.scheme.lower() not in {"http", "https"}:
            raise CookbookRetrievalError(f"Blocked URL with unsupported scheme: {url}")
        if not parsed.hostname:
            raise CookbookRetrievalError(f"Blocked URL with missing host: {url}")

    def _read_limited(self, response: httpx.Response, url: str) -> bytes:
        content_length = response.headers.get("Content-Length")
        if content_length:
            try:
                declared_size = int(content_length)
            except ValueError:
                declared_size = 0
            if declared_size > self.max_response_bytes:
                raise CookbookRetrievalError(
                    f"Response from {url} exceeds the size limit."
                )
        chunks: list[bytes] = []
        received = 0
        for chunk in response.iter_bytes():
            received += len(chunk)
            if received > self.max_response_bytes:
                raise CookbookRetrievalError(
                    f"Response from {url} exceeded the allowed size limit."
                )
            chunks.append(chunk)
        return b"".join(chunks)
