"""Fixtures for infrastructure tests that stub out ``httpx``."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from unittest.mock import MagicMock, patch

import pytest


def _mock_response(
    status_code: int = 200,
    json_data: object | None = None,
    text: str = "",
    headers: dict[str, str] | None = None,
) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    if json_data is None and not text:
        resp.json.side_effect = ValueError("no JSON body")
    else:
        resp.json.return_value = json_data
    resp.text = text
    resp.headers = headers or {}
    return resp


@pytest.fixture
def response() -> Callable[..., MagicMock]:
    """Factory for fake ``httpx.Response`` objects."""
    return _mock_response


@pytest.fixture
def http_client() -> Iterator[MagicMock]:
    """The client every ``httpx.Client(...)`` context hands out.

    Queue responses on ``http_client.request.side_effect`` and inspect
    ``http_client.request.call_args_list`` afterwards.
    """
    mock_client = MagicMock()
    mock_client.__enter__ = MagicMock(return_value=mock_client)
    mock_client.__exit__ = MagicMock(return_value=False)
    with patch(
        "herald.infrastructure.http.transport.httpx.Client",
        return_value=mock_client,
    ):
        yield mock_client
