"""
Configuration management for Mintlify MCP Server.

Constants live at module level; runtime overrides come from environment
variables (read through the getters below) and from command line flags.
"""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Sequence
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from mintlify_mcp.types import KnownDoc

LOGGER_NAME = "mintlify_mcp"


# =============================================================================
# Upstream API
# =============================================================================

DEFAULT_API_BASE = "https://leaves.mintlify.com/api/assistant"
DEFAULT_TIMEOUT = 120.0  # seconds; answers are buffered in full before decoding

# Unknown project ids are assumed to be hosted on the default Mintlify domain
FALLBACK_DOMAIN_SUFFIX = ".mintlify.app"

GENERIC_SERVER_NAME = "mintlify-mcp"


# =============================================================================
# Known Documentation Sites
# =============================================================================

KNOWN_DOCS: dict[str, KnownDoc] = {
    "agno-v2": KnownDoc(project_id="agno-v2", name="Agno", domain="docs.agno.com"),
}


def get_known_doc(project_id: str) -> KnownDoc | None:
    """Look up a known documentation site by project id."""
    return KNOWN_DOCS.get(project_id)


def register_known_doc(project_id: str, name: str, domain: str) -> KnownDoc:
    """Add or replace a known documentation site."""
    doc = KnownDoc(project_id=project_id, name=name, domain=normalize_domain(domain))
    KNOWN_DOCS[project_id] = doc
    return doc


def normalize_domain(value: str) -> str:
    """Reduce a docs URL (or bare domain) to its host name."""
    value = value.strip()
    if "://" not in value:
        value = f"https://{value}"
    host = urlparse(value).hostname
    if not host:
        raise ValueError(f"Cannot extract a domain from {value!r}")
    return host


def fallback_domain(project_id: str) -> str:
    """Domain used for project ids that are not in KNOWN_DOCS."""
    return f"{project_id}{FALLBACK_DOMAIN_SUFFIX}"


# =============================================================================
# Getters
# =============================================================================


def get_api_base() -> str:
    """Get the assistant API base URL with env override support."""
    return os.environ.get("MINTLIFY_API_BASE", DEFAULT_API_BASE).rstrip("/")


def get_timeout() -> float:
    """Get the upstream request timeout in seconds."""
    raw = os.environ.get("MINTLIFY_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError as e:
        raise ValueError(f"MINTLIFY_TIMEOUT must be a number, got {raw!r}") from e
    if timeout <= 0:
        raise ValueError("MINTLIFY_TIMEOUT must be positive")
    return timeout


def get_log_level() -> str:
    """Get the log level name; unrecognised names fall back to INFO."""
    level = os.environ.get("MINTLIFY_LOG_LEVEL", "INFO").strip().upper()
    return level if level in logging.getLevelNamesMapping() else "INFO"


# =============================================================================
# Server Settings
# =============================================================================


class ServerSettings(BaseModel):
    """Startup settings for one server instance."""

    project_id: str | None = Field(default=None, description="Lock the server to this project")
    project_name: str | None = Field(default=None, description="Display name for the locked project")
    domain: str | None = Field(default=None, description="Docs domain for the locked project")

    @field_validator("project_id", "project_name", "domain")
    @classmethod
    def _blank_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @property
    def is_locked(self) -> bool:
        return self.project_id is not None

    @property
    def display_name(self) -> str | None:
        """Name shown to the agent: explicit name, known-docs name, then the id."""
        if self.project_name:
            return self.project_name
        if self.project_id:
            doc = get_known_doc(self.project_id)
            return doc.name if doc else self.project_id
        return None

    @property
    def server_name(self) -> str:
        if self.is_locked:
            return f"{self.display_name}-docs"
        return GENERIC_SERVER_NAME


CLI_EPILOG = """\
examples:
  # Generic mode - query any Mintlify docs
  mintlify-mcp

  # Specialized mode - locked to Agno docs
  mintlify-mcp --project agno-v2

  # Specialized mode for a site that is not built in
  mintlify-mcp -p resend -n Resend -d https://resend.com/docs

MCP client configuration (specialized, recommended):
  {
    "mcpServers": {
      "agno": {
        "command": "uvx",
        "args": ["mintlify-mcp", "--project", "agno-v2"]
      }
    }
  }
"""


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mintlify-mcp",
        description="Query Mintlify-powered documentation from an MCP client",
        epilog=CLI_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-p", "--project", metavar="ID", help="Lock to a specific Mintlify project ID")
    parser.add_argument(
        "-n", "--name", metavar="NAME", help='Custom display name (default: project name or "Mintlify")'
    )
    parser.add_argument(
        "-d", "--domain", metavar="DOMAIN", help="Docs site domain or URL for the locked project"
    )
    return parser


def parse_cli_args(argv: Sequence[str] | None = None) -> ServerSettings:
    """Parse command line flags into ServerSettings.

    A --domain given together with --project registers the project in
    KNOWN_DOCS so requests carry the right Origin/Referer headers.
    """
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.domain and not args.project:
        parser.error("--domain requires --project")

    try:
        get_timeout()
    except ValueError as e:
        parser.error(str(e))

    settings = ServerSettings(project_id=args.project, project_name=args.name, domain=args.domain)

    if settings.project_id and settings.domain:
        known = get_known_doc(settings.project_id)
        name = settings.project_name or (known.name if known else settings.project_id)
        try:
            register_known_doc(settings.project_id, name, settings.domain)
        except ValueError as e:
            parser.error(str(e))

    return settings
