"""Unit tests for assistant.py - request construction and upstream errors.

Upstream traffic goes through httpx.MockTransport; no network access.
"""

from unittest.mock import patch

import httpx
import pytest

from mintlify_mcp.assistant import (
    AssistantBridge,
    build_headers,
    build_messages,
    build_payload,
    resolve_domain,
)
from mintlify_mcp.config import DEFAULT_API_BASE, register_known_doc
from mintlify_mcp.stream import NO_RESPONSE_MESSAGE
from mintlify_mcp.types import Turn, UpstreamError


class TestRequestConstruction:
    """Pure request-building helpers."""

    def test_known_project_domain(self):
        assert resolve_domain("agno-v2") == "docs.agno.com"

    def test_unknown_project_uses_fallback_domain(self):
        assert resolve_domain("acme") == "acme.mintlify.app"

    def test_registered_project_domain(self):
        register_known_doc("resend", "Resend", "https://resend.com/docs")
        assert resolve_domain("resend") == "resend.com"

    def test_build_messages_appends_user_turn(self):
        history = [Turn.create(1, "user", "Q1"), Turn.create(2, "assistant", "A1")]
        messages = build_messages("Q2", history)

        assert len(messages) == 3
        assert messages[:2] == history
        new = messages[-1]
        assert (new.id, new.role, new.content) == ("3", "user", "Q2")
        assert new.to_dict()["parts"] == [{"type": "text", "text": "Q2"}]

    def test_payload_duplicates_project_id(self):
        payload = build_payload("acme", build_messages("Q"))
        assert payload["id"] == "acme"
        assert payload["fp"] == "acme"
        assert payload["messages"][0]["content"] == "Q"

    def test_headers_mimic_browser_origin(self):
        headers = build_headers("docs.agno.com")
        assert headers == {
            "Content-Type": "application/json",
            "Origin": "https://docs.agno.com",
            "Referer": "https://docs.agno.com/",
        }

    def test_default_api_base(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("MINTLIFY_API_BASE", raising=False)
        bridge = AssistantBridge()
        assert bridge.message_url("agno-v2") == f"{DEFAULT_API_BASE}/agno-v2/message"

    def test_timeout_read_lazily(self):
        with patch.dict("os.environ", {"MINTLIFY_TIMEOUT": "abc"}):
            bridge = AssistantBridge("https://assistant.test")
            with pytest.raises(ValueError, match="MINTLIFY_TIMEOUT"):
                bridge.timeout
        assert AssistantBridge("https://assistant.test", timeout=7.5).timeout == 7.5


class TestAsk:
    """Round trips through the fake assistant."""

    @pytest.mark.asyncio
    async def test_posts_to_project_endpoint(self, bridge: AssistantBridge, fake_assistant):
        fake_assistant.queue("Use ", "`pip install agno`.")

        answer = await bridge.ask("agno-v2", "How do I install?")

        assert answer == "Use `pip install agno`."
        request = fake_assistant.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{bridge.api_base}/agno-v2/message"
        assert request.headers["origin"] == "https://docs.agno.com"
        assert request.headers["referer"] == "https://docs.agno.com/"
        assert request.headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_unknown_project_is_a_valid_request(self, bridge: AssistantBridge, fake_assistant):
        await bridge.ask("some-new-project", "Hi")

        request = fake_assistant.requests[0]
        assert request.headers["origin"] == "https://some-new-project.mintlify.app"
        body = fake_assistant.bodies[0]
        assert body["id"] == body["fp"] == "some-new-project"
        assert [m["content"] for m in body["messages"]] == ["Hi"]

    @pytest.mark.asyncio
    async def test_history_is_replayed(self, bridge: AssistantBridge, fake_assistant):
        history = [Turn.create(1, "user", "Q1"), Turn.create(2, "assistant", "A1")]

        await bridge.ask("p", "Q2", history)

        messages = fake_assistant.last_messages
        assert [(m["role"], m["content"]) for m in messages] == [
            ("user", "Q1"),
            ("assistant", "A1"),
            ("user", "Q2"),
        ]
        assert [m["id"] for m in messages] == ["1", "2", "3"]

    @pytest.mark.asyncio
    async def test_empty_answer_returns_fallback(self, bridge: AssistantBridge, fake_assistant):
        fake_assistant.responses.append(httpx.Response(200, text='f:{"messageId":"m"}\nd:{}\n'))
        assert await bridge.ask("p", "Q") == NO_RESPONSE_MESSAGE

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,reason", [(404, "Not Found"), (500, "Internal Server Error")])
    async def test_error_status_raises(
        self, bridge: AssistantBridge, fake_assistant, status: int, reason: str
    ):
        fake_assistant.queue_status(status)

        with pytest.raises(UpstreamError) as exc_info:
            await bridge.ask("p", "Q")

        err = exc_info.value
        assert err.status_code == status
        assert err.status_text == reason
        assert str(err) == f"Mintlify API error: {status} {reason}"
        assert err.to_dict()["code"] == "UPSTREAM_ERROR"

    @pytest.mark.asyncio
    async def test_client_recreated_after_close(self, bridge: AssistantBridge, fake_assistant):
        async with bridge:
            await bridge.ask("p", "Q1")
        await bridge.ask("p", "Q2")
        await bridge.aclose()

        assert len(fake_assistant.requests) == 2
