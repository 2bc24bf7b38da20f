"""Tests for the OpenAlex dispatcher using a mocked transport."""

import asyncio

import httpx
import pytest

from openalex_mcp.core.clients.openalex import USER_AGENT, OpenAlexFetcher
from openalex_mcp.core.models import (
    AutocompleteEnvelope,
    ErrorKind,
    GroupByEnvelope,
    ListEnvelope,
    OpenAlexError,
)

from .fakes import LIST_PAYLOAD, Upstream

URL = "https://api.openalex.org/works"


class TestSuccess:
    async def test_list_envelope(self, upstream):
        result = await upstream.fetcher().fetch_list(URL)

        assert result.kind == "ok"
        assert isinstance(result.value, ListEnvelope)
        assert result.value.meta.count == 1
        assert result.value.results[0]["display_name"] == "Attention Is All You Need"

    async def test_sends_get_with_user_agent(self, upstream):
        await upstream.fetcher().fetch_entity(URL + "/W123")

        request = upstream.requests[0]
        assert request.method == "GET"
        assert request.headers["User-Agent"] == USER_AGENT
        assert upstream.last_url == URL + "/W123"

    async def test_entity_is_opaque(self):
        payload = {"id": "https://openalex.org/W123", "custom": {"nested": [1, 2]}}
        result = await Upstream(payload=payload).fetcher().fetch_entity(URL + "/W123")
        assert result.unwrap() == payload

    async def test_group_by_envelope(self):
        payload = {
            "meta": {"count": 2, "groups_count": 2},
            "group_by": [
                {"key": "article", "key_display_name": "article", "count": 10},
                {"key": "book", "key_display_name": "book", "count": 3},
            ],
        }
        result = await Upstream(payload=payload).fetcher().fetch_group_by(URL + "?group_by=type")
        assert isinstance(result.value, GroupByEnvelope)
        assert [b.count for b in result.value.group_by] == [10, 3]

    async def test_autocomplete_envelope(self):
        payload = {
            "meta": {"count": 1, "db_response_time_ms": 4},
            "results": [{"id": "A1", "display_name": "Charles Darwin", "entity_type": "author"}],
        }
        result = await Upstream(payload=payload).fetcher().fetch_autocomplete(URL)
        assert isinstance(result.value, AutocompleteEnvelope)
        assert result.value.results[0].display_name == "Charles Darwin"

    async def test_unknown_fields_are_kept(self):
        payload = {**LIST_PAYLOAD, "group_by": [], "extra": "kept"}
        result = await Upstream(payload=payload).fetcher().fetch_list(URL)
        dumped = result.value.model_dump(exclude_unset=True)
        assert dumped["extra"] == "kept"
        assert dumped["group_by"] == []


class TestFailures:
    async def test_http_error_exposes_status_and_body(self):
        upstream = Upstream(status_code=404, text='{"error":"not found"}')
        result = await upstream.fetcher().fetch_entity(URL + "/W0")

        assert result.kind == "err"
        assert result.error.kind == ErrorKind.HTTP
        assert result.error.status_code == 404
        assert result.error.body == '{"error":"not found"}'
        assert result.error.message == "OpenAlex API error: Not Found"

    async def test_http_error_is_not_retried(self):
        upstream = Upstream(status_code=503, text="unavailable")
        await upstream.fetcher().fetch_list(URL)
        assert len(upstream.requests) == 1

    async def test_timeout_has_no_status(self):
        async def slow(request):
            await asyncio.sleep(1)
            return httpx.Response(200, json=LIST_PAYLOAD)

        fetcher = OpenAlexFetcher(timeout_ms=50, transport=httpx.MockTransport(slow))
        result = await fetcher.fetch_list(URL)

        assert result.error.kind == ErrorKind.TIMEOUT
        assert result.error.status_code is None
        assert result.error.message == "Request timeout after 50ms"

    async def test_httpx_timeout_is_classified_as_timeout(self):
        def raise_timeout(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        fetcher = OpenAlexFetcher(transport=httpx.MockTransport(raise_timeout))
        result = await fetcher.fetch_entity(URL)
        assert result.error.kind == ErrorKind.TIMEOUT

    async def test_transport_failure(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        fetcher = OpenAlexFetcher(transport=httpx.MockTransport(refuse))
        result = await fetcher.fetch_entity(URL)

        assert result.error.kind == ErrorKind.TRANSPORT
        assert result.error.status_code is None
        assert "connection refused" in result.error.message

    async def test_control_character_in_url(self, upstream):
        result = await upstream.fetcher().fetch_entity(URL + "/W1\x01")

        assert result.error.kind == ErrorKind.TRANSPORT
        assert result.error.status_code is None
        assert result.error.message.startswith("Request failed:")
        assert upstream.requests == []

    async def test_url_too_long(self, upstream):
        result = await upstream.fetcher().fetch_list(URL + "?filter=" + "a" * 70_000)

        assert result.error.kind == ErrorKind.TRANSPORT
        assert result.error.message.startswith("Request failed:")
        assert upstream.requests == []

    async def test_malformed_json(self):
        result = await Upstream(text="<html>oops</html>").fetcher().fetch_entity(URL)
        assert result.error.kind == ErrorKind.DECODE
        assert result.error.status_code is None

    async def test_wrong_envelope_shape(self):
        result = await Upstream(payload={"results": "not a list"}).fetcher().fetch_list(URL)
        assert result.error.kind == ErrorKind.DECODE

    async def test_unwrap_raises(self):
        result = await Upstream(status_code=400, text="bad filter").fetcher().fetch_list(URL)
        with pytest.raises(OpenAlexError) as excinfo:
            result.unwrap()
        assert excinfo.value.status_code == 400
        assert excinfo.value.response_body == "bad filter"


async def test_concurrent_calls_are_independent(upstream):
    fetcher = upstream.fetcher()
    results = await asyncio.gather(*(fetcher.fetch_list(f"{URL}?page={n}") for n in range(1, 6)))
    assert all(r.kind == "ok" for r in results)
    assert sorted(str(r.url) for r in upstream.requests) == sorted(f"{URL}?page={n}" for n in range(1, 6))


def test_default_timeout():
    assert OpenAlexFetcher().timeout_ms == 30_000
