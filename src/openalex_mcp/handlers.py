"""Entity operations shared by the REST router and the MCP tools.

Each operation builds the upstream URL, injects the configured polite-pool
email when the caller did not supply one, and returns the fetcher's
``Ok``/``Err`` result unchanged. Mapping errors to a user-visible response
is left to the boundary, via ``error_status``/``error_body`` for HTTP and
``render_tool_result`` for tools.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from pydantic import BaseModel

from .config import Settings
from .core.clients.openalex import OpenAlexFetcher
from .core.models import EntityType, Err, Ok, QueryOptions, UpstreamError
from .core.query_builder import build_autocomplete_url, build_random_url, build_url

logger = logging.getLogger(__name__)


def _with_mailto(options: QueryOptions, settings: Settings) -> QueryOptions:
    if options.mailto or not settings.openalex_email:
        return options
    return options.model_copy(update={"mailto": settings.openalex_email})


async def list_entities(
    fetcher: OpenAlexFetcher,
    settings: Settings,
    entity_type: EntityType,
    options: Optional[QueryOptions] = None,
) -> Ok | Err:
    """List entities, or group counts when ``group_by`` is set."""
    opts = _with_mailto(options or QueryOptions(), settings)
    url = build_url(entity_type, opts, base_url=settings.base_url)
    if opts.group_by:
        return await fetcher.fetch_group_by(url)
    return await fetcher.fetch_list(url)


async def get_entity(
    fetcher: OpenAlexFetcher,
    settings: Settings,
    entity_type: EntityType,
    entity_id: str,
    options: Optional[QueryOptions] = None,
) -> Ok | Err:
    opts = _with_mailto(options or QueryOptions(), settings)
    url = build_url(entity_type, opts, entity_id=entity_id, base_url=settings.base_url)
    return await fetcher.fetch_entity(url)


async def random_entity(
    fetcher: OpenAlexFetcher,
    settings: Settings,
    entity_type: EntityType,
    mailto: Optional[str] = None,
) -> Ok | Err:
    url = build_random_url(entity_type, mailto or settings.openalex_email, base_url=settings.base_url)
    return await fetcher.fetch_entity(url)


async def autocomplete(
    fetcher: OpenAlexFetcher,
    settings: Settings,
    entity_type: EntityType,
    query: str,
    mailto: Optional[str] = None,
) -> Ok | Err:
    url = build_autocomplete_url(entity_type, query, mailto or settings.openalex_email, base_url=settings.base_url)
    return await fetcher.fetch_autocomplete(url)


def payload_of(value: Any) -> Any:
    """Plain JSON data for a decoded payload, leaving upstream fields as received."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_unset=True)
    return value


def error_status(error: UpstreamError) -> int:
    return error.status_code or 500


def error_body(error: UpstreamError) -> dict:
    return {"error": error.message, "statusCode": error.status_code}


def render_tool_result(result: Ok | Err) -> str:
    """Render a result as tool text. Errors become a message, never an exception."""
    if result.kind == "ok":
        return json.dumps(payload_of(result.value), indent=2)
    error = result.error
    logger.info("Tool call failed (%s): %s", error.kind.value, error.message)
    return f"OpenAlex API Error: {error.message}"
