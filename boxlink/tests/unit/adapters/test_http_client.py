from __future__ import annotations

import pytest
import requests

from boxlink.adapters.api_errors import ApiTransportError
from boxlink.adapters.http_client import HttpConfig, ListStoreSession, ODATA_JSON


class _RaisingSession:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc
        self.calls = 0

    def get(self, *args, **kwargs):
        self.calls += 1
        raise self.exc

    def post(self, *args, **kwargs):
        self.calls += 1
        raise self.exc


class _RecordingSession:
    def __init__(self) -> None:
        self.kwargs = {}

    def post(self, url, **kwargs):
        self.kwargs = kwargs
        return "ok"


def test_timeout_is_wrapped_and_not_retried() -> None:
    stub = _RaisingSession(requests.exceptions.Timeout("slow"))
    http = ListStoreSession(HttpConfig(request_timeout_s=5), session=stub)  # type: ignore[arg-type]

    with pytest.raises(ApiTransportError) as info:
        http.get("https://tenant.example.com/_api/web")

    assert stub.calls == 1
    assert "tenant.example.com" in str(info.value)


def test_connection_error_on_post_is_wrapped() -> None:
    stub = _RaisingSession(requests.exceptions.ConnectionError("refused"))
    http = ListStoreSession(HttpConfig(), session=stub)  # type: ignore[arg-type]

    with pytest.raises(ApiTransportError):
        http.post("https://tenant.example.com/_api/contextinfo")


def test_post_without_body_omits_content_type() -> None:
    stub = _RecordingSession()
    http = ListStoreSession(HttpConfig(access_token=None), session=stub)  # type: ignore[arg-type]

    http.post("https://tenant.example.com/_api/contextinfo", headers={"X-Extra": "1"})

    headers = stub.kwargs["headers"]
    assert headers["Accept"] == ODATA_JSON
    assert "Content-Type" not in headers
    assert "Authorization" not in headers
    assert headers["X-Extra"] == "1"
    assert stub.kwargs["data"] is None
    assert stub.kwargs["timeout"] == 30
