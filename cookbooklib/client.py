from __future__ import annotations

from typing import Mapping
import logging
import urllib.parse

import httpx

from .cookbook import Cookbook
from .exceptions import CookbookRetrievalError
from .http import DEFAULT_TIMEOUT_SECONDS, HttpClient, HttpResponse
from .models import ErrorResponse

logger = logging.getLogger(__name__)

V1_API_URL = "https://supermarket.chef.io/api/v1"


class CookbookClient:
    """Looks up cookbooks on the index service.

    The client owns one HTTP session for its whole life, shared with every
    cookbook it returns; call :meth:`close` (or use it as a context manager)
    when done. A session passed in through ``http_client`` stays the
    caller's to close.
    """

    def __init__(
        self,
        base_url: str = V1_API_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: HttpClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_http_client = http_client is None
        self.http_client = http_client or HttpClient(timeout_seconds=timeout_seconds)

    def cookbook_url(self, name: str) -> str:
        return f"{self.base_url}/cookbooks/{urllib.parse.quote(name, safe='')}"

    def get_cookbook(self, name: str) -> Cookbook | None:
        """Return the named cookbook, or ``None`` if the index does not know it.

        Raises:
            CookbookRetrievalError: the service answered with anything other
                than the cookbook or a well-formed "not found" error.
        """
        if not name:
            raise ValueError("Cookbook name must not be empty.")
        response = self.http_client.get(self.cookbook_url(name))

        if response.status_code == httpx.codes.OK:
            try:
                payload = response.json()
            except ValueError as exc:
                raise CookbookRetrievalError(
                    f"Failed to parse JSON of response: {response.text}"
                ) from exc
            return Cookbook.from_payload(payload, http_client=self.http_client)

        if response.status_code == httpx.codes.NOT_FOUND:
            # The service reports an unknown cookbook as 404 with a JSON error
            # body, whatever content type it declares.
            error = self._parse_error_response(response)
            if error.is_not_found:
                logger.debug("Cookbook %s not found", name)
                return None
            raise CookbookRetrievalError(f"Invalid request; response was: {response.text}")

        raise CookbookRetrievalError(
            f"Unexpected response from cookbook server: {response.status_code} "
            f"for {response.url}"
        )

    @staticmethod
    def _parse_error_response(response: HttpResponse) -> ErrorResponse:
        try:
            data = response.json()
        except ValueError as exc:
            raise CookbookRetrievalError(
                f"Failed to parse JSON of response: {response.text}"
            ) from exc
        if not isinstance(data, Mapping):
            raise CookbookRetrievalError(f"Failed to parse JSON of response: {response.text}")
        return ErrorResponse.from_dict(data)

    def close(self) -> None:
        if self._owns_http_client:
            self.http_client.close()

    def __enter__(self) -> CookbookClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
