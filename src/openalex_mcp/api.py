"""REST router for the OpenAlex proxy.

Routes:
    GET /                          service info
    GET /{entity}                  list (or group_by counts)
    GET /{entity}/random           random entity
    GET /{entity}/{id}             single entity
    GET /autocomplete/{entity}?q=  suggestions

Run: openalex-api
"""

from __future__ import annotations

import logging
from typing import Optional

import uvicorn
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from . import __version__, handlers
from .config import Settings, configure_logging
from .core.clients.openalex import OpenAlexFetcher
from .core.models import EntityType, Ok, Err
from .core.query_builder import parse_query_params

logger = logging.getLogger(__name__)

QUERY_PARAMETERS = [
    "filter",
    "search",
    "sort",
    "page",
    "per_page",
    "cursor",
    "select",
    "sample",
    "seed",
    "group_by",
    "mailto",
]


def _not_found() -> JSONResponse:
    return JSONResponse(
        {
            "error": "Not found",
            "message": "Invalid endpoint. Valid entities: " + ", ".join(EntityType.values()),
        },
        status_code=404,
    )


def _entity_or_none(request: Request) -> Optional[EntityType]:
    try:
        return EntityType(request.path_params["entity"])
    except ValueError:
        return None


def _respond(result: Ok | Err) -> JSONResponse:
    if result.kind == "ok":
        return JSONResponse(handlers.payload_of(result.value))
    return JSONResponse(handlers.error_body(result.error), status_code=handlers.error_status(result.error))


async def root(request: Request) -> JSONResponse:
    return JSONResponse({
        "name": "OpenAlex Proxy API",
        "version": __version__,
        "description": "REST and MCP wrapper for the OpenAlex scholarly-data API",
        "endpoints": {
            "entities": "/:entity (" + ", ".join(EntityType.values()) + ")",
            "singleEntity": "/:entity/:id",
            "randomEntity": "/:entity/random",
            "autocomplete": "/autocomplete/:entity?q=query",
        },
        "documentation": "https://docs.openalex.org",
        "queryParameters": QUERY_PARAMETERS,
    })


async def entity_list(request: Request) -> JSONResponse:
    entity = _entity_or_none(request)
    if entity is None:
        return _not_found()
    options = parse_query_params(request.query_params)
    state = request.app.state
    return _respond(await handlers.list_entities(state.fetcher, state.settings, entity, options))


async def entity_random(request: Request) -> JSONResponse:
    entity = _entity_or_none(request)
    if entity is None:
        return _not_found()
    state = request.app.state
    mailto = request.query_params.get("mailto")
    return _respond(await handlers.random_entity(state.fetcher, state.settings, entity, mailto))


def _raw_segments(request: Request) -> list[str]:
    """Path segments before percent-decoding, so an encoded DOI stays one segment."""
    raw = request.scope.get("raw_path") or request.url.path.encode()
    path = raw.decode("latin-1").split("?", 1)[0]
    return path.strip("/").split("/")


async def entity_single(request: Request) -> JSONResponse:
    entity = _entity_or_none(request)
    if entity is None:
        return _not_found()
    options = parse_query_params(request.query_params)
    segments = _raw_segments(request)
    if len(segments) == 1:
        return await entity_list(request)
    if len(segments) != 2:
        return _not_found()
    state = request.app.state
    entity_id = segments[1]
    return _respond(await handlers.get_entity(state.fetcher, state.settings, entity, entity_id, options))


async def entity_autocomplete(request: Request) -> JSONResponse:
    entity = _entity_or_none(request)
    if entity is None:
        return _not_found()
    query = request.query_params.get("q", "")
    if not query:
        return JSONResponse({"error": "Missing required parameter: q"}, status_code=400)
    state = request.app.state
    mailto = request.query_params.get("mailto")
    return _respond(await handlers.autocomplete(state.fetcher, state.settings, entity, query, mailto))


async def http_error(request: Request, exc: HTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return _not_found()
    if exc.status_code == 405:
        return JSONResponse({"error": "Method not allowed"}, status_code=405, headers=exc.headers)
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


def create_app(
    settings: Optional[Settings] = None,
    fetcher: Optional[OpenAlexFetcher] = None,
) -> Starlette:
    """Build the REST application. Pass a fetcher to substitute the upstream transport."""
    settings = settings or Settings.from_env()
    fetcher = fetcher or OpenAlexFetcher(timeout_ms=settings.timeout_ms)

    routes = [
        Route("/", root, methods=["GET"]),
        Route("/autocomplete/{entity}", entity_autocomplete, methods=["GET"]),
        Route("/{entity}", entity_list, methods=["GET"]),
        Route("/{entity}/random", entity_random, methods=["GET"]),
        Route("/{entity}/{entity_id:path}", entity_single, methods=["GET"]),
    ]
    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "OPTIONS"],
            allow_headers=["Content-Type"],
        ),
    ]
    app = Starlette(routes=routes, middleware=middleware, exception_handlers={HTTPException: http_error})
    app.state.settings = settings
    app.state.fetcher = fetcher
    return app


def main():
    """Entry point for the REST server."""
    settings = Settings.from_env()
    configure_logging(settings)
    logger.info("Starting OpenAlex REST proxy on %s:%d", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
