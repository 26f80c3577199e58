"""
Bridge to the Mintlify documentation assistant API.

Builds the upstream request for a project, question and prior history,
sends it, and decodes the buffered response body into plain text.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Any

import httpx

from mintlify_mcp.config import LOGGER_NAME, fallback_domain, get_api_base, get_known_doc, get_timeout
from mintlify_mcp.stream import parse_streamed_response
from mintlify_mcp.types import Turn, UpstreamError

logger = logging.getLogger(LOGGER_NAME)


def resolve_domain(project_id: str) -> str:
    """Docs domain for a project: known site, else the default Mintlify host."""
    doc = get_known_doc(project_id)
    return doc.domain if doc else fallback_domain(project_id)


def build_messages(question: str, history: Sequence[Turn] = ()) -> list[Turn]:
    """Prior turns followed by a new user turn for the question."""
    return [*history, Turn.create(len(history) + 1, "user", question)]


def build_payload(project_id: str, messages: Sequence[Turn]) -> dict[str, Any]:
    # The API expects the project id twice, as "id" and as the "fp" fingerprint
    return {
        "id": project_id,
        "fp": project_id,
        "messages": [m.to_dict() for m in messages],
    }


def build_headers(domain: str) -> dict[str, str]:
    # Requests without a browser-like Origin/Referer are rejected upstream
    return {
        "Content-Type": "application/json",
        "Origin": f"https://{domain}",
        "Referer": f"https://{domain}/",
    }


class AssistantBridge:
    """Client for the assistant's message endpoint.

    Owns one httpx.AsyncClient, created on first use. Pass ``transport`` to
    route requests somewhere other than the network (tests use
    ``httpx.MockTransport``).
    """

    def __init__(
        self,
        api_base: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_base = (api_base or get_api_base()).rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> AssistantBridge:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    @property
    def timeout(self) -> float:
        """Request timeout in seconds, read from the environment unless given."""
        return self._timeout if self._timeout is not None else get_timeout()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def message_url(self, project_id: str) -> str:
        return f"{self.api_base}/{project_id}/message"

    async def ask(self, project_id: str, question: str, history: Sequence[Turn] = ()) -> str:
        """
        Ask the project's assistant a question.

        Args:
            project_id: Mintlify project id (unknown ids use the fallback domain)
            question: The question text
            history: Prior turns replayed as conversational context

        Returns:
            The answer as plain text, or NO_RESPONSE_MESSAGE if it was empty

        Raises:
            UpstreamError: The API answered with a non-success status
        """
        domain = resolve_domain(project_id)
        messages = build_messages(question, history)

        logger.info("   📤 POST %s (%d messages, origin %s)", project_id, len(messages), domain)
        start = time.time()

        response = await self._get_client().post(
            self.message_url(project_id),
            json=build_payload(project_id, messages),
            headers=build_headers(domain),
        )

        if not response.is_success:
            logger.warning("   ❌ HTTP %d from assistant for %s", response.status_code, project_id)
            raise UpstreamError(
                response.status_code,
                response.reason_phrase,
                details={"project_id": project_id, "url": str(response.url)},
            )

        body = response.text
        logger.info("   📥 %d bytes in %.1fs", len(body), time.time() - start)
        return parse_streamed_response(body)


__all__ = [
    "AssistantBridge",
    "build_headers",
    "build_messages",
    "build_payload",
    "resolve_domain",
]
