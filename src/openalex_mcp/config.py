"""Runtime configuration from environment variables."""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict

from .core.clients.openalex import DEFAULT_TIMEOUT_MS
from .core.query_builder import API_BASE

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8787
MCP_TRANSPORTS = ("stdio", "sse", "streamable-http")


class Settings(BaseModel):
    """Process-wide settings. Built once at startup and passed down."""

    model_config = ConfigDict(frozen=True)

    openalex_email: Optional[str] = None
    base_url: str = API_BASE
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    mcp_transport: str = "stdio"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        transport = env.get("OPENALEX_MCP_TRANSPORT", "stdio")
        if transport not in MCP_TRANSPORTS:
            raise ValueError(f"Invalid OPENALEX_MCP_TRANSPORT: {transport}. Use one of {', '.join(MCP_TRANSPORTS)}.")

        return cls(
            openalex_email=env.get("OPENALEX_EMAIL") or None,
            base_url=env.get("OPENALEX_BASE_URL") or API_BASE,
            timeout_ms=_int_env(env, "OPENALEX_TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
            host=env.get("OPENALEX_HOST") or DEFAULT_HOST,
            port=_int_env(env, "OPENALEX_PORT", DEFAULT_PORT),
            mcp_transport=transport,
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")
