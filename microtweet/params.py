"""
Query parameters, HTTP verbs and the rules for where parameters travel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Sequence

from oauthlib.oauth1.rfc5849.utils import escape

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class QueryParameter(NamedTuple):
    """Ordered key/value pair used for signing and wire encoding."""

    key: str
    value: str


class Placement(Enum):
    QUERY = "query"
    BODY = "body"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"

    @property
    def placement(self) -> Placement:
        return PLACEMENT_POLICY[self]


PLACEMENT_POLICY: dict[HttpMethod, Placement] = {
    HttpMethod.GET: Placement.QUERY,
    HttpMethod.POST: Placement.BODY,
}


@dataclass(slots=True)
class OutgoingRequest:
    """A fully placed request, ready to be signed and transmitted."""

    method: HttpMethod
    uri: str
    body: bytes | None = None
    headers: dict[str, str] = field(default_factory=dict)


def percent_encode(value: str) -> str:
    """Escape ``value`` per RFC 3986, the encoding Twitter requires for OAuth."""

    return escape(value)


def encode_parameters(parameters: Sequence[QueryParameter] | None) -> str | None:
    """
    Join parameters as ``key=value`` pairs separated by ``&``.

    Returns ``None`` when there is nothing to encode so callers can tell an
    absent query string apart from an empty one.
    """

    if not parameters:
        return None
    return "&".join(
        f"{percent_encode(parameter.key)}={percent_encode(parameter.value)}"
        for parameter in parameters
    )


def place_parameters(
    method: HttpMethod,
    uri_base: str,
    parameters: Sequence[QueryParameter] | None = None,
) -> OutgoingRequest:
    """
    Build the outgoing request for ``method``, putting the encoded parameters
    in the query string or in a form body according to ``PLACEMENT_POLICY``.
    """

    encoded = encode_parameters(parameters)
    request = OutgoingRequest(method=method, uri=uri_base)
    if encoded is None:
        return request

    if method.placement is Placement.QUERY:
        request.uri = f"{uri_base}?{encoded}"
    else:
        body = encoded.encode("utf-8")
        request.body = body
        request.headers["Content-Type"] = FORM_CONTENT_TYPE
        request.headers["Content-Length"] = str(len(body))
    return request
