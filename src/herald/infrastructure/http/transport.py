"""Single-attempt HTTP calls shared by the platform clients."""

from __future__ import annotations

import logging

from typing import Any, TypeVar

import httpx

from pydantic import BaseModel, TypeAdapter, ValidationError

from herald.shared.constants import DEFAULT_TIMEOUT_SECONDS
from herald.shared.exceptions import DecorationError, UnexpectedResponseError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def request(
    platform: str,
    method: str,
    url: str,
    *,
    headers: dict[str, str],
    json: object | None = None,
    data: dict[str, Any] | None = None,
    params: dict[str, Any] | None = None,
) -> httpx.Response:
    """Issue one request; a connection is opened and closed around it.

    Raises:
        DecorationError: If the request could not be sent.
    """
    try:
        with httpx.Client(timeout=DEFAULT_TIMEOUT_SECONDS) as client:
            return client.request(
                method,
                url,
                headers=headers,
                json=json,
                data=data,
                params=params,
            )
    except httpx.HTTPError as e:
        msg = f"{platform} API error: {e}"
        raise DecorationError(msg) from e


def check(
    platform: str,
    response: httpx.Response,
    expected: int | tuple[int, ...],
) -> httpx.Response:
    """Insist on one of the *expected* status codes.

    Raises:
        UnexpectedResponseError: If the platform answered with another status.
    """
    codes = expected if isinstance(expected, tuple) else (expected,)
    if response.status_code not in codes:
        logger.error(
            "%s response status did not match expected value %s. Got %d: %s",
            platform,
            codes,
            response.status_code,
            response.text,
        )
        raise UnexpectedResponseError(
            platform, codes, response.status_code, response.text
        )
    return response


def send(
    platform: str,
    method: str,
    url: str,
    *,
    headers: dict[str, str],
    expected: int | tuple[int, ...] = 200,
    json: object | None = None,
    data: dict[str, Any] | None = None,
    params: dict[str, Any] | None = None,
) -> httpx.Response:
    """``request`` followed by ``check``; nothing is retried.

    Raises:
        UnexpectedResponseError: If the platform answers with another status.
        DecorationError: If the request could not be sent.
    """
    response = request(
        platform, method, url, headers=headers, json=json, data=data, params=params
    )
    return check(platform, response, expected)


def json_body(platform: str, response: httpx.Response) -> object:
    """Decode a JSON response body.

    Raises:
        DecorationError: If the body is not JSON.
    """
    try:
        return response.json()
    except ValueError as e:
        msg = f"{platform} API returned a body that is not JSON: {e}"
        raise DecorationError(msg) from e


def parse(platform: str, model: type[ModelT], payload: object) -> ModelT:
    """Validate a decoded response body against its wire model.

    Raises:
        DecorationError: If the body does not have the expected shape.
    """
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        msg = f"Unexpected {platform} response for {model.__name__}: {e}"
        raise DecorationError(msg) from e


def parse_list(platform: str, model: type[ModelT], payload: object) -> list[ModelT]:
    """Validate a decoded JSON array against its element wire model.

    Raises:
        DecorationError: If the body does not have the expected shape.
    """
    try:
        adapter = TypeAdapter(list[model])  # type: ignore[valid-type]
        return adapter.validate_python(payload)
    except ValidationError as e:
        msg = f"Unexpected {platform} response for list of {model.__name__}: {e}"
        raise DecorationError(msg) from e
