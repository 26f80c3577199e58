"""
Decoding of the assistant API's line-prefixed response body.

Each line of the body starts with a short tag and a colon, for example::

    0:"Hello"                  text chunk
    9:{"toolCallId": ...}      tool call
    a:{"result": [...]}        tool result / search results (often 50-100KB)
    e:{"finishReason": ...}    finish metadata
    d:{"finishReason": ...}    done signal
    f:{"messageId": ...}       message metadata

Only text chunks make it into the answer. Everything else is skipped without
being parsed so large search payloads never reach the caller.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator
from enum import Enum

from mintlify_mcp.config import LOGGER_NAME
from mintlify_mcp.types import DecodeError

logger = logging.getLogger(LOGGER_NAME)

NO_RESPONSE_MESSAGE = "No response generated. Please try rephrasing your question."

# One leading and one trailing double quote
_EDGE_QUOTES = re.compile(r'^"|"$')


class LineKind(Enum):
    """Payload kind announced by a line's prefix."""

    TEXT_CHUNK = "0"
    TOOL_CALL = "9"
    TOOL_RESULT = "a"
    FINISH = "e"
    DONE = "d"
    MESSAGE = "f"
    UNKNOWN = ""


_PREFIXES: dict[str, LineKind] = {kind.value: kind for kind in LineKind if kind is not LineKind.UNKNOWN}


def classify_line(line: str) -> tuple[LineKind, str]:
    """Split a line into its kind and the payload after the prefix."""
    prefix, sep, payload = line.partition(":")
    if not sep or len(prefix) > 2:
        return LineKind.UNKNOWN, line
    return _PREFIXES.get(prefix, LineKind.UNKNOWN), payload


def _reject_constant(token: str) -> object:
    # NaN and Infinity are not valid JSON text
    raise ValueError(f"Invalid JSON constant {token}")


def _decode_strict(payload: str) -> object:
    try:
        return json.loads(payload, parse_constant=_reject_constant)
    except ValueError as e:
        raise DecodeError(payload) from e


def decode_text_chunk(payload: str) -> str | None:
    """Decode a text-chunk payload.

    Valid JSON strings are returned as-is; other valid JSON yields None.
    Malformed payloads fall back to stripping the surrounding quotes.
    """
    try:
        value = _decode_strict(payload)
    except DecodeError as e:
        logger.debug("Recovering text chunk: %s", e.message)
        text = _EDGE_QUOTES.sub("", payload)
        return text or None
    return value if isinstance(value, str) else None


def iter_text_chunks(body: str) -> Iterator[str]:
    """Yield text fragments in line order."""
    for line in body.split("\n"):
        kind, payload = classify_line(line)
        if kind is not LineKind.TEXT_CHUNK:
            continue
        text = decode_text_chunk(payload)
        if text is not None:
            yield text


def parse_streamed_response(body: str) -> str:
    """Join all text chunks of a response body into the final answer."""
    content = "".join(iter_text_chunks(body)).strip()
    return content or NO_RESPONSE_MESSAGE


__all__ = [
    "NO_RESPONSE_MESSAGE",
    "LineKind",
    "classify_line",
    "decode_text_chunk",
    "iter_text_chunks",
    "parse_streamed_response",
]
