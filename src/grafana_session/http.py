"""HTTP utilities for Grafana API access."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import requests
from requests import Response, Session

from .exceptions import APIError, TransportError

SUCCESS_STATUS = 200


@dataclass(slots=True)
class HttpResponse:
    """Typed response wrapper with helper accessors."""

    status_code: int
    data: Any
    headers: Mapping[str, str]


def error_message(response: Response) -> str:
    """Return the ``message`` field of a Grafana error body, or ``""``."""

    try:
        payload = response.json()
    except ValueError:
        return ""
    if isinstance(payload, Mapping):
        message = payload.get("message")
        if isinstance(message, str):
            return message
    return ""


def ensure_success(response: Response) -> None:
    """Raise `APIError` unless Grafana answered 200."""

    if response.status_code == SUCCESS_STATUS:
        return
    raise APIError(error_message(response), code=response.status_code)


@contextmanager
def exchange(
    session: Session,
    method: str,
    url: str,
    *,
    headers: MutableMapping[str, str] | None = None,
    json_payload: Mapping[str, Any] | None = None,
    timeout: float | tuple[float, float] | None = None,
    verify: bool | str = True,
) -> Iterator[Response]:
    """Perform one request and yield the successful, still unread response.

    The body is streamed, so callers decode it inside the ``with`` block. The
    response is closed when the block exits, whether it finished or raised.
    """

    try:
        response = session.request(
            method=method,
            url=url,
            headers=headers,
            json=json_payload,
            timeout=timeout,
            verify=verify,
            stream=True,
        )
    except requests.RequestException as exc:
        reason = str(exc).strip() or exc.__class__.__name__
        raise TransportError(f"Unable to perform the http request: {reason}") from exc

    with response:
        ensure_success(response)
        yield response


def request(
    session: Session,
    method: str,
    url: str,
    *,
    headers: MutableMapping[str, str] | None = None,
    json_payload: Mapping[str, Any] | None = None,
    timeout: float | tuple[float, float] | None = None,
    verify: bool | str = True,
) -> HttpResponse:
    """Make a request and return a parsed response envelope.

    JSON decoding errors from a successful response are not converted; they
    surface as ``requests.JSONDecodeError``.
    """

    with exchange(
        session,
        method,
        url,
        headers=headers,
        json_payload=json_payload,
        timeout=timeout,
        verify=verify,
    ) as response:
        data: Any = None
        if response.content:
            data = response.json()
        return HttpResponse(status_code=response.status_code, data=data, headers=response.headers)
