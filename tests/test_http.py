import httpx
import pytest

from cookbooklib.exceptions import CookbookRetrievalError
from cookbooklib.http import HttpClient


def _client(handler, **kwargs) -> HttpClient:
    return HttpClient(transport=httpx.MockTransport(handler), **kwargs)


def test_http_client_blocks_unsupported_schemes():
    client = HttpClient()
    with pytest.raises(CookbookRetrievalError):
        client.get("ftp://example.com/cookbook.tar.gz")
    client.close()


def test_http_client_blocks_urls_without_host():
    client = HttpClient()
    with pytest.raises(CookbookRetrievalError):
        client.get("https:///cookbooks/apache2")
    client.close()


def test_http_client_sends_json_headers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["accept"] = request.headers.get("Accept")
        seen["content_type"] = request.headers.get("Content-Type")
        return httpx.Response(200, json={"ok": True})

    client = _client(handler)
    assert client.get_json("https://example.com/api") == {"ok": True}
    assert seen == {"accept": "application/json", "content_type": "application/json"}
    client.close()


def test_http_client_get_returns_status_without_raising():
    client = _client(lambda request: httpx.Response(503, text="maintenance"))
    response = client.get("https://example.com/api")
    assert response.status_code == 503
    assert response.text == "maintenance"
    client.close()


def test_http_client_get_json_rejects_non_ok_status():
    client = _client(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(CookbookRetrievalError, match="500"):
        client.get_json("https://example.com/api")
    client.close()


def test_http_client_get_json_rejects_invalid_json():
    client = _client(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(CookbookRetrievalError, match="Invalid JSON"):
        client.get_json("https://example.com/api")
    client.close()


def test_http_client_wraps_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    client = _client(handler)
    with pytest.raises(CookbookRetrievalError) as excinfo:
        client.get("https://example.com/api")
    assert isinstance(excinfo.value.__cause__, httpx.ConnectTimeout)
    client.close()


def test_http_client_limits_response_size():
    client = _client(
        lambda request: httpx.Response(200, content=b"too-large-response"),
        max_response_bytes=5,
    )
    with pytest.raises(CookbookRetrievalError):
        client.get("https://example.com/api")
    client.close()


def test_http_client_close_is_idempotent():
    client = _client(lambda request: httpx.Response(200, json={}))
    with client:
        assert not client.closed
    assert client.closed
    client.close()
    assert client.closed
