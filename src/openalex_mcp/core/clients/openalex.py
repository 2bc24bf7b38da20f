"""OpenAlex API client.

API docs: https://docs.openalex.org/
No authentication. Requests that carry a mailto address are routed to the
polite pool, which has more consistent response times.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Type

import httpx
from pydantic import BaseModel

from ..models import (
    AutocompleteEnvelope,
    Err,
    ErrorKind,
    GroupByEnvelope,
    ListEnvelope,
    Ok,
    UpstreamError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30_000
USER_AGENT = "openalex-mcp/0.1 (+https://github.com/openalex-mcp)"


class OpenAlexFetcher:
    """Issues GET requests against resolved OpenAlex URLs.

    Construct one and pass it to the handlers. Every call opens its own
    client, so calls share no state and may run concurrently.

    Args:
        timeout_ms: Overall deadline for a single call, in milliseconds.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.
        user_agent: Value of the User-Agent header sent with every call.
    """

    def __init__(
        self,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        user_agent: str = USER_AGENT,
    ):
        self.timeout_ms = timeout_ms or DEFAULT_TIMEOUT_MS
        self._transport = transport
        self._user_agent = user_agent

    async def _get(self, url: str) -> httpx.Response:
        seconds = self.timeout_ms / 1000
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=httpx.Timeout(seconds),
            headers={"User-Agent": self._user_agent},
        ) as client:
            response = await asyncio.wait_for(client.get(url), timeout=seconds)
            return response

    async def fetch(self, url: str, envelope: Optional[Type[BaseModel]] = None) -> Ok | Err:
        """Fetch a URL and decode the JSON body.

        Returns ``Ok`` with the decoded payload (validated into ``envelope``
        when one is given) or ``Err`` with a classified ``UpstreamError``.
        """
        try:
            response = await self._get(url)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            error = UpstreamError(
                kind=ErrorKind.TIMEOUT,
                message=f"Request timeout after {self.timeout_ms}ms",
            )
            logger.warning("OpenAlex request timed out: %s", url)
            return Err(error=error)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("OpenAlex request failed: %s: %s", url, exc)
            return Err(error=UpstreamError(kind=ErrorKind.TRANSPORT, message=f"Request failed: {exc}"))

        if not response.is_success:
            logger.warning("OpenAlex returned %d for %s", response.status_code, url)
            return Err(error=UpstreamError(
                kind=ErrorKind.HTTP,
                message=f"OpenAlex API error: {response.reason_phrase}",
                status_code=response.status_code,
                body=response.text,
            ))

        try:
            data = response.json()
            if envelope is not None:
                data = envelope.model_validate(data)
        except ValueError as exc:
            logger.warning("Could not decode OpenAlex response for %s: %s", url, exc)
            return Err(error=UpstreamError(kind=ErrorKind.DECODE, message=f"Request failed: {exc}"))

        return Ok(value=data)

    async def fetch_entity(self, url: str) -> Ok | Err:
        """Fetch a single entity as an opaque dict."""
        return await self.fetch(url)

    async def fetch_list(self, url: str) -> Ok | Err:
        return await self.fetch(url, ListEnvelope)

    async def fetch_group_by(self, url: str) -> Ok | Err:
        return await self.fetch(url, GroupByEnvelope)

    async def fetch_autocomplete(self, url: str) -> Ok | Err:
        return await self.fetch(url, AutocompleteEnvelope)
