"""
Draining a response body of declared length from a streaming transport.
"""

from __future__ import annotations

import logging
from typing import Protocol

from microtweet.exceptions import TransportFailure

logger = logging.getLogger(__name__)


class ReadableStream(Protocol):
    """Byte stream that may fill less of the buffer than requested."""

    def readinto(self, buffer: memoryview) -> int | None:
        ...


def read_body(
    stream: ReadableStream,
    length: int,
    *,
    strict: bool = False,
    chunk_size: int | None = None,
) -> bytes:
    """
    Read exactly ``length`` bytes from ``stream`` into one contiguous buffer.

    Each ``readinto`` call may deliver any number of bytes. The loop stops
    once nothing remains or the stream reports no further bytes (a read of
    0 or ``None``).

    Args:
        stream: Source with a ``readinto`` method.
        length: Declared content length of the body.
        strict: Raise ``TransportFailure`` when the stream ends before
            ``length`` bytes arrived instead of returning the shorter body.
        chunk_size: Upper bound on the bytes requested per read call.

    Returns:
        The body bytes; shorter than ``length`` only in non-strict mode
        when the stream ended early.
    """

    if length < 0:
        raise ValueError("length must not be negative")
    if chunk_size is not None and chunk_size <= 0:
        raise ValueError("chunk_size must be a positive integer")

    buffer = bytearray(length)
    view = memoryview(buffer)
    offset = 0
    try:
        while offset < length:
            remaining = length - offset
            request = remaining if chunk_size is None else min(remaining, chunk_size)
            received = stream.readinto(view[offset : offset + request])
            if not received:
                break
            offset += received
    finally:
        view.release()

    if offset < length:
        if strict:
            raise TransportFailure(
                f"Response body ended after {offset} of {length} declared bytes."
            )
        # Accepted as complete; the caller sees the truncated body.
        logger.warning("short_read received=%s declared=%s", offset, length)

    return bytes(buffer[:offset])
