"""Shared fixtures: a fake assistant API served through httpx.MockTransport."""

from __future__ import annotations

import json
from unittest.mock import patch

import httpx
import pytest

from mintlify_mcp import config
from mintlify_mcp.assistant import AssistantBridge
from mintlify_mcp.conversation import ConversationStore

API_BASE = "https://assistant.test/api/assistant"


def sse_body(*chunks: str, extra: bool = True) -> str:
    """Build a response body with one text-chunk line per chunk."""
    lines = ['f:{"messageId":"msg-1"}']
    for chunk in chunks:
        lines.append("0:" + json.dumps(chunk))
        if extra:
            lines.append('a:{"toolCallId":"call-1","result":[{"title":"Docs"}]}')
    lines.append('e:{"finishReason":"stop"}')
    lines.append('d:{"finishReason":"stop"}')
    return "\n".join(lines) + "\n"


class FakeAssistant:
    """Records every request and replies with queued responses.

    Answers default to "Answer N" for the Nth request.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []

    def queue(self, *chunks: str, status_code: int = 200) -> None:
        self.responses.append(httpx.Response(status_code, text=sse_body(*chunks)))

    def queue_status(self, status_code: int) -> None:
        self.responses.append(httpx.Response(status_code, text="upstream failure"))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            return self.responses.pop(0)
        return httpx.Response(200, text=sse_body(f"Answer {len(self.requests)}"))

    @property
    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]

    @property
    def last_messages(self) -> list[dict]:
        return self.bodies[-1]["messages"]


@pytest.fixture(autouse=True)
def _restore_known_docs():
    """Keep KNOWN_DOCS registrations local to each test."""
    with patch.dict(config.KNOWN_DOCS):
        yield


@pytest.fixture
def fake_assistant() -> FakeAssistant:
    return FakeAssistant()


@pytest.fixture
def bridge(fake_assistant: FakeAssistant) -> AssistantBridge:
    return AssistantBridge(API_BASE, timeout=5.0, transport=httpx.MockTransport(fake_assistant.handler))


@pytest.fixture
def store() -> ConversationStore:
    return ConversationStore()
