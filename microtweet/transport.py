"""
HTTP transport used by the request pipeline, built on requests.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import ContextManager, Iterator, Mapping, Protocol

import requests
import urllib3.exceptions

from microtweet.exceptions import TransportFailure
from microtweet.params import OutgoingRequest
from microtweet.reader import ReadableStream

logger = logging.getLogger(__name__)


class TransportResponse(Protocol):
    """Response surface the pipeline needs from a transport."""

    @property
    def status_code(self) -> int:
        ...

    @property
    def headers(self) -> Mapping[str, str]:
        ...

    @property
    def content_length(self) -> int | None:
        ...

    @property
    def stream(self) -> ReadableStream:
        ...


class Transport(Protocol):
    """Performs one round trip; the response is released when the context exits."""

    def send(self, request: OutgoingRequest, authorization: str) -> ContextManager[TransportResponse]:
        ...

    def close(self) -> None:
        ...


class _RawStream:
    """Adapts ``response.raw`` so read errors surface as ``TransportFailure``."""

    def __init__(self, raw) -> None:
        self._raw = raw

    def readinto(self, buffer: memoryview) -> int | None:
        try:
            return self._raw.readinto(buffer)
        except (requests.RequestException, urllib3.exceptions.HTTPError, OSError) as exc:
            raise TransportFailure(f"Error while reading response body: {exc}") from exc


class RequestsResponse:
    """``TransportResponse`` view over a streamed ``requests.Response``."""

    def __init__(self, response: requests.Response) -> None:
        self._response = response
        # read_body decides how a body shorter than Content-Length is handled.
        if hasattr(response.raw, "enforce_content_length"):
            response.raw.enforce_content_length = False
        self._stream = _RawStream(response.raw)

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> Mapping[str, str]:
        return self._response.headers

    @property
    def content_length(self) -> int | None:
        value = self._response.headers.get("Content-Length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError as exc:
            raise TransportFailure(f"Invalid Content-Length header '{value}'.") from exc

    @property
    def stream(self) -> ReadableStream:
        return self._stream


class RequestsTransport:
    """Transport over a ``requests.Session`` with streamed, uncompressed bodies.

    Compression is refused so the declared ``Content-Length`` equals the
    number of bytes read from the raw stream.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout

    @contextmanager
    def send(self, request: OutgoingRequest, authorization: str) -> Iterator[RequestsResponse]:
        headers = {
            "Accept-Encoding": "identity",
            **request.headers,
            "Authorization": authorization,
        }
        prepared = self._session.prepare_request(
            requests.Request(
                method=request.method.value,
                url=request.uri,
                data=request.body,
                headers=headers,
            )
        )

        try:
            response = self._session.send(prepared, stream=True, timeout=self._timeout)
        except requests.RequestException as exc:
            raise TransportFailure(
                f"{request.method.value} {request.uri} failed: {exc}"
            ) from exc

        with response:
            yield RequestsResponse(response)

    def close(self) -> None:
        self._session.close()
