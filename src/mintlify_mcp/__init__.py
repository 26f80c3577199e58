"""Mintlify MCP Server

Documentation Q&A through the Mintlify assistant API:
- ask_docs: Ask any Mintlify-powered docs site a question
- list_docs: List the built-in documentation sites
- clear_conversation: Reset a project's conversation history
"""

try:
    from importlib.metadata import PackageNotFoundError, version
except (ImportError, ModuleNotFoundError):
    __version__ = "0.0.0+unknown"
else:
    try:
        __version__ = version("mintlify-mcp")
    except PackageNotFoundError:
        __version__ = "0.0.0+unknown"

from mintlify_mcp.assistant import AssistantBridge
from mintlify_mcp.conversation import ConversationStore
from mintlify_mcp.server import create_server, main, mcp
from mintlify_mcp.stream import NO_RESPONSE_MESSAGE, LineKind, parse_streamed_response
from mintlify_mcp.types import (
    ConversationState,
    DecodeError,
    KnownDoc,
    MintlifyError,
    Part,
    Turn,
    UpstreamError,
)

__all__ = [
    "__version__",
    "AssistantBridge",
    "ConversationState",
    "ConversationStore",
    "DecodeError",
    "KnownDoc",
    "LineKind",
    "MintlifyError",
    "NO_RESPONSE_MESSAGE",
    "Part",
    "Turn",
    "UpstreamError",
    "create_server",
    "main",
    "mcp",
    "parse_streamed_response",
]
