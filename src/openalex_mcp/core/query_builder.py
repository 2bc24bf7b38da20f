"""Query URL construction for the OpenAlex API.

API docs: https://docs.openalex.org/how-to-use-the-api/api-overview
Builds fully-qualified request URLs from filter, search, sort, pagination,
field selection, sampling, grouping and polite-pool options. Filter and
sort syntax is forwarded verbatim; upstream reports any errors.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional
from urllib.parse import urlencode

from .models import EntityType, QueryOptions

logger = logging.getLogger(__name__)

API_BASE = "https://api.openalex.org"

_INT_FIELDS = ("page", "per_page", "sample", "seed")
_STR_FIELDS = ("filter", "search", "sort", "cursor", "select", "group_by", "mailto")


class QueryBuilder:
    """Fluent builder for a single request URL.

    Each setter ignores falsy values, so absent options never show up as
    empty parameters. Setting the same option twice keeps the last value.
    """

    def __init__(
        self,
        entity_type: EntityType,
        entity_id: Optional[str] = None,
        base_url: str = API_BASE,
    ):
        entity = EntityType(entity_type).value
        base = base_url.rstrip("/")
        if entity_id:
            self._path = f"{base}/{entity}/{entity_id}"
        else:
            self._path = f"{base}/{entity}"
        self._params: dict[str, str] = {}

    def _set(self, key: str, value: object) -> "QueryBuilder":
        self._params[key] = str(value)
        return self

    def filter(self, filter_string: Optional[str]) -> "QueryBuilder":
        """Comma-separated filters, e.g. ``publication_year:2023,is_oa:true``."""
        if filter_string:
            self._set("filter", filter_string)
        return self

    def search(self, term: Optional[str]) -> "QueryBuilder":
        if term:
            self._set("search", term)
        return self

    def sort(self, field: Optional[str]) -> "QueryBuilder":
        """Sort field with optional direction, e.g. ``cited_by_count:desc``."""
        if field:
            self._set("sort", field)
        return self

    def page(self, number: Optional[int], per_page: Optional[int] = None) -> "QueryBuilder":
        if number:
            self._set("page", number)
        if per_page:
            self._set("per-page", per_page)
        return self

    def per_page(self, limit: Optional[int]) -> "QueryBuilder":
        if limit:
            self._set("per-page", limit)
        return self

    def cursor(self, token: Optional[str]) -> "QueryBuilder":
        if token:
            self._set("cursor", token)
        return self

    def select(self, fields: Optional[str]) -> "QueryBuilder":
        """Comma-separated top-level fields, e.g. ``id,doi,display_name``."""
        if fields:
            self._set("select", fields)
        return self

    def sample(self, size: Optional[int], seed: Optional[int] = None) -> "QueryBuilder":
        if size and size > 0:
            self._set("sample", size)
        # zero is a valid seed
        if seed is not None:
            self._set("seed", seed)
        return self

    def group_by(self, field: Optional[str]) -> "QueryBuilder":
        if field:
            self._set("group_by", field)
        return self

    def mailto(self, email: Optional[str]) -> "QueryBuilder":
        if email:
            self._set("mailto", email)
        return self

    def build(self) -> str:
        query = urlencode(self._params)
        return f"{self._path}?{query}" if query else self._path


def build_url(
    entity_type: EntityType,
    options: Optional[QueryOptions] = None,
    entity_id: Optional[str] = None,
    base_url: str = API_BASE,
) -> str:
    """Build a list or single-entity URL from query options.

    ``page`` and ``cursor`` are both forwarded when both are given; upstream
    decides which one wins.
    """
    opts = options or QueryOptions()
    builder = QueryBuilder(entity_type, entity_id, base_url=base_url)

    builder.filter(opts.filter).search(opts.search).sort(opts.sort)
    if opts.page:
        builder.page(opts.page, opts.per_page)
    else:
        builder.per_page(opts.per_page)
    builder.cursor(opts.cursor)
    builder.select(opts.select)
    builder.sample(opts.sample, opts.seed)
    builder.group_by(opts.group_by)
    builder.mailto(opts.mailto)

    url = builder.build()
    logger.debug("Built OpenAlex URL: %s", url)
    return url


def build_random_url(
    entity_type: EntityType,
    mailto: Optional[str] = None,
    base_url: str = API_BASE,
) -> str:
    """URL for a random entity; only the contact email is attached."""
    entity = EntityType(entity_type).value
    path = f"{base_url.rstrip('/')}/{entity}/random"
    if mailto:
        return f"{path}?{urlencode({'mailto': mailto})}"
    return path


def build_autocomplete_url(
    entity_type: EntityType,
    query: str,
    mailto: Optional[str] = None,
    base_url: str = API_BASE,
) -> str:
    entity = EntityType(entity_type).value
    params = {"q": query}
    if mailto:
        params["mailto"] = mailto
    return f"{base_url.rstrip('/')}/autocomplete/{entity}?{urlencode(params)}"


def _parse_int(name: str, raw: str) -> Optional[int]:
    try:
        return int(raw)
    except ValueError:
        logger.debug("Dropping non-integer %s=%r", name, raw)
        return None


def _first(params: Mapping[str, str], name: str) -> Optional[str]:
    """First value of a possibly repeated key."""
    getlist = getattr(params, "getlist", None)
    if getlist is not None:
        values = getlist(name)
        return values[0] if values else None
    return params.get(name)


def parse_query_params(params: Mapping[str, str]) -> QueryOptions:
    """Convert inbound REST query parameters into QueryOptions.

    Accepts ``per_page`` and ``per-page``. Integer options that do not parse
    are dropped rather than rejected.
    """
    values: dict[str, object] = {}
    for name in _STR_FIELDS:
        raw = _first(params, name)
        if raw:
            values[name] = raw

    for name in _INT_FIELDS:
        raw = _first(params, name)
        if raw is None and name == "per_page":
            raw = _first(params, "per-page")
        if raw is None or raw == "":
            continue
        parsed = _parse_int(name, raw)
        if parsed is not None:
            values[name] = parsed

    return QueryOptions(**values)
