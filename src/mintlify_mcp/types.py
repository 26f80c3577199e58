"""
Data types for Mintlify MCP Server.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

Role = Literal["user", "assistant"]


# =============================================================================
# Exceptions
# =============================================================================


class MintlifyError(Exception):
    """Base error for assistant bridge operations.

    Provides structured error information with error codes for programmatic handling.
    """

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class UpstreamError(MintlifyError):
    """The assistant API answered with a non-success HTTP status."""

    def __init__(self, status_code: int, status_text: str, details: dict[str, Any] | None = None):
        self.status_code = status_code
        self.status_text = status_text
        super().__init__(
            code="UPSTREAM_ERROR",
            message=f"Mintlify API error: {status_code} {status_text}".rstrip(),
            details=details,
        )


class DecodeError(MintlifyError):
    """A text-chunk payload was not a valid JSON string."""

    def __init__(self, payload: str):
        self.payload = payload
        super().__init__(code="DECODE_ERROR", message=f"Malformed text chunk: {payload[:80]!r}")


# =============================================================================
# Conversation Types
# =============================================================================


def utc_timestamp() -> str:
    """Current time as ISO-8601 UTC with milliseconds, e.g. 2025-01-31T12:00:00.000Z."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class Part:
    """A typed fragment of a message."""

    text: str
    type: str = "text"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True, slots=True)
class Turn:
    """One message in a conversation, in the assistant API's wire shape."""

    id: str
    role: Role
    content: str
    created_at: str
    parts: tuple[Part, ...] = ()

    @classmethod
    def create(cls, ordinal: int, role: Role, text: str) -> Turn:
        """Build a turn stamped with the current time and a single text part."""
        return cls(
            id=str(ordinal),
            role=role,
            content=text,
            created_at=utc_timestamp(),
            parts=(Part(text=text),),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON object sent upstream."""
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "createdAt": self.created_at,
            "parts": [p.to_dict() for p in self.parts],
        }


@dataclass(slots=True)
class ConversationState:
    """Ordered turn history for one project.

    Always empty or an even-length user/assistant alternation starting with user.
    """

    messages: list[Turn] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.messages)


# =============================================================================
# Known Documentation Sites
# =============================================================================


@dataclass(frozen=True, slots=True)
class KnownDoc:
    """A documentation site with a Mintlify assistant."""

    project_id: str
    name: str
    domain: str

    @property
    def url(self) -> str:
        return f"https://{self.domain}"
