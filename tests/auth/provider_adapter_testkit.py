"""Test utilities for ProviderAdapter tests.

This module keeps provider adapter tests consistent and reduces copy/paste.
It provides a minimal async HTTP client fake matching the shape used by
provider adapters via `create_http_client()`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class FakeResponse:
    status_code: int
    payload: Any
    text: str = ""

    def json(self) -> Any:
        return self.payload


@dataclass(frozen=True)
class FakeResponseJsonError(FakeResponse):
    def json(self) -> Any:
        raise ValueError("invalid json")


@dataclass
class RecordedCall:
    method: str
    url: str
    kwargs: dict[str, Any] = field(default_factory=dict)


class FakeAsyncHttpClient:
    """Minimal async context manager used by provider adapters.

    - `post()` returns `post_response` (or raises `post_exception`)
    - `get()` routes responses by substring match on URL (first match wins),
      or raises `get_exception`
    - Every call is recorded in `calls` for assertions
    """

    def __init__(
        self,
        *,
        post_response: FakeResponse | None = None,
        get_responses: dict[str, FakeResponse] | None = None,
        default_get_response: FakeResponse | None = None,
        post_exception: Exception | None = None,
        get_exception: Exception | None = None,
    ) -> None:
        self._post_response = post_response or FakeResponse(200, {})
        self._get_responses = dict(get_responses or {})
        self._default_get_response = default_get_response or FakeResponse(200, {})
        self._post_exception = post_exception
        self._get_exception = get_exception
        self.calls: list[RecordedCall] = []

    async def __aenter__(self) -> FakeAsyncHttpClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: Any,
    ) -> bool:
        return False

    @property
    def post_calls(self) -> list[RecordedCall]:
        return [c for c in self.calls if c.method == "POST"]

    @property
    def get_calls(self) -> list[RecordedCall]:
        return [c for c in self.calls if c.method == "GET"]

    async def post(self, url: Any, **kwargs: Any) -> FakeResponse:
        self.calls.append(RecordedCall("POST", str(url), kwargs))
        if self._post_exception is not None:
            raise self._post_exception
        return self._post_response

    async def get(self, url: Any, **kwargs: Any) -> FakeResponse:
        self.calls.append(RecordedCall("GET", str(url), kwargs))
        if self._get_exception is not None:
            raise self._get_exception
        url_str = str(url)
        for route_substring, resp in self._get_responses.items():
            if route_substring in url_str:
                return resp
        return self._default_get_response


def patch_http_client(monkeypatch: Any, create_client_path: str, fake_client: Any) -> None:
    """Patch a provider adapter module's `create_http_client`."""

    monkeypatch.setattr(create_client_path, lambda *args, **kwargs: fake_client)
