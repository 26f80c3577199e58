"""
Mintlify MCP Server

Answers documentation questions through the Mintlify assistant API:
- ask_docs: Ask any Mintlify-powered docs site (generic mode)
- list_docs: Show the built-in documentation sites
- clear_conversation: Drop a project's conversation history

Started with --project, the server is locked to one docs site and exposes
only ask and clear_history.
"""

# NOTE: Do NOT use `from __future__ import annotations` with FastMCP/Pydantic
# as it breaks type resolution for Annotated parameters in tool functions

import contextlib
import logging
import time
from collections.abc import AsyncIterator, Sequence
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from mintlify_mcp import __version__
from mintlify_mcp.assistant import AssistantBridge
from mintlify_mcp.config import KNOWN_DOCS, LOGGER_NAME, ServerSettings, get_log_level, parse_cli_args
from mintlify_mcp.conversation import ConversationStore

# Configure logging (stderr; stdout carries the MCP protocol)
logger = logging.getLogger(LOGGER_NAME)
logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


# =============================================================================
# Instructions
# =============================================================================

GENERIC_INSTRUCTIONS = """
Mintlify MCP Server - ask questions to Mintlify-powered documentation sites

## Ask (ask_docs)
Send a question to a docs site's AI assistant and get an answer with code examples.
- project_id: the Mintlify project id (see list_docs); unknown ids are tried as {id}.mintlify.app
- continue_conversation: true to keep the previous questions as context

## Known sites (list_docs)
Built-in project ids and their documentation URLs.

## Reset (clear_conversation)
Forget the conversation history for one project.
"""


def _locked_instructions(doc_name: str) -> str:
    return f"""
{doc_name} documentation assistant

## Ask (ask)
Ask a question about {doc_name}. Follow-up questions keep the earlier ones as context.

## Reset (clear_history)
Start a fresh conversation.
"""


# =============================================================================
# Helper Functions
# =============================================================================


def format_known_docs() -> str:
    """Render KNOWN_DOCS as a markdown list."""
    docs_list = "\n".join(
        f"- **{doc.name}** (`{project_id}`) - {doc.url}" for project_id, doc in KNOWN_DOCS.items()
    )
    return (
        f"# Available Documentation\n\n{docs_list}\n\n"
        "> Use any project_id with ask_docs, or configure a specialized MCP with --project"
    )


async def answer_question(
    store: ConversationStore,
    bridge: AssistantBridge,
    project_id: str,
    question: str,
    *,
    reset: bool,
) -> str:
    """
    Ask the assistant and record the exchange in the project's history.

    The project's lock is held for the whole round trip so concurrent calls
    for the same project cannot interleave their turns.

    Raises:
        ToolError: Any failure while answering, returned to the client as an error result
    """
    start = time.time()
    async with store.lock(project_id):
        state = store.get_or_create(project_id, reset=reset)
        try:
            answer = await bridge.ask(project_id, question, list(state.messages))
        except Exception as e:
            logger.exception("Question for %s failed: %s", project_id, e)
            raise ToolError(f"Error: {str(e) or type(e).__name__}") from e
        store.append_exchange(project_id, question, answer)

    logger.info("   ✅ Answered in %.1fs (%d turns in history)", time.time() - start, len(state))
    return answer


# =============================================================================
# Server Factory
# =============================================================================


def create_server(
    settings: ServerSettings | None = None,
    *,
    bridge: AssistantBridge | None = None,
    store: ConversationStore | None = None,
) -> FastMCP:
    """
    Build a FastMCP server for the given settings.

    Args:
        settings: Startup settings; generic mode when no project is locked
        bridge: Assistant client (default: one configured from the environment)
        store: Conversation history (default: a fresh in-memory store)

    Returns:
        FastMCP instance with the tools for the selected mode registered
    """
    settings = settings if settings is not None else ServerSettings()
    bridge = bridge if bridge is not None else AssistantBridge()
    store = store if store is not None else ConversationStore()

    @contextlib.asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[dict]:
        try:
            yield {}
        finally:
            await bridge.aclose()

    if settings.is_locked:
        project_id = settings.project_id
        doc_name = settings.display_name
        mcp = FastMCP(name=settings.server_name, instructions=_locked_instructions(doc_name), lifespan=lifespan)

        @mcp.tool(
            description=(
                f"Ask a question about {doc_name} documentation. The AI will search the docs "
                "and provide a relevant answer with code examples."
            ),
            annotations={"readOnlyHint": True, "openWorldHint": True},
        )
        async def ask(
            question: Annotated[str, f"Your question about {doc_name}"],
        ) -> str:
            logger.info("📚 ask [%s]: %s", project_id, question[:100])
            return await answer_question(store, bridge, project_id, question, reset=False)

        @mcp.tool(annotations={"idempotentHint": True})
        async def clear_history() -> str:
            """Clear conversation history to start fresh."""
            logger.info("🧹 clear_history [%s]", project_id)
            async with store.lock(project_id):
                store.clear(project_id)
            return "Conversation history cleared."

        return mcp

    mcp = FastMCP(name=settings.server_name, instructions=GENERIC_INSTRUCTIONS, lifespan=lifespan)

    @mcp.tool(annotations={"readOnlyHint": True, "openWorldHint": True})
    async def ask_docs(
        project_id: Annotated[
            str,
            'The Mintlify project ID (e.g., "agno-v2" for Agno docs). Use list_docs to see available options.',
        ],
        question: Annotated[str, "The question to ask the documentation"],
        continue_conversation: Annotated[
            bool, "Keep previous questions for this project as context (default: start fresh)"
        ] = False,
    ) -> str:
        """
        Ask a question to a Mintlify-powered documentation site. Provide the project_id and your question.

        Returns:
            The assistant's answer as markdown text
        """
        logger.info("📚 ask_docs [%s]: %s", project_id, question[:100])
        return await answer_question(store, bridge, project_id, question, reset=not continue_conversation)

    @mcp.tool(annotations={"readOnlyHint": True})
    async def list_docs() -> str:
        """List all known Mintlify documentation sites."""
        return format_known_docs()

    @mcp.tool(annotations={"idempotentHint": True})
    async def clear_conversation(
        project_id: Annotated[str, "The project ID to clear history for"],
    ) -> str:
        """Clear conversation history for a project."""
        logger.info("🧹 clear_conversation [%s]", project_id)
        async with store.lock(project_id):
            store.clear(project_id)
        return f"History cleared for: {project_id}"

    return mcp


# Generic-mode instance, for `fastmcp run` and imports
mcp = create_server()


# =============================================================================
# Main Entry Point
# =============================================================================


def main(argv: Sequence[str] | None = None) -> None:
    """Run the MCP server on stdio transport."""
    settings = parse_cli_args(argv)
    server = create_server(settings) if settings.is_locked else mcp

    mode = f"locked to {settings.display_name}" if settings.is_locked else "generic mode"
    logger.info("🚀 Starting %s v%s (FastMCP)", settings.server_name, __version__)
    logger.info("   Transport: stdio")
    logger.info("   Mode: %s", mode)

    try:
        server.run(transport="stdio")
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        raise SystemExit(1) from e


# Export for use as module
__all__ = ["answer_question", "create_server", "format_known_docs", "main", "mcp"]


if __name__ == "__main__":
    main()
