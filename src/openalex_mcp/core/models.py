"""Pydantic data models — the shared value objects.

Both the REST router and the MCP tool server use these models as the common
interface for query construction, dispatch results, and error reporting.
Entity payloads are not modeled; they pass through as opaque JSON.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class EntityType(str, Enum):
    """OpenAlex entity collections."""

    WORKS = "works"
    AUTHORS = "authors"
    SOURCES = "sources"
    INSTITUTIONS = "institutions"
    TOPICS = "topics"
    PUBLISHERS = "publishers"
    FUNDERS = "funders"
    KEYWORDS = "keywords"
    GEO = "geo"

    @classmethod
    def values(cls) -> list[str]:
        return [e.value for e in cls]


class QueryOptions(BaseModel):
    """Named query options for a single upstream request.

    Falsy values are treated as absent when the URL is built, except ``seed``
    where zero is a valid value.
    """

    model_config = ConfigDict(frozen=True)

    filter: Optional[str] = None
    search: Optional[str] = None
    sort: Optional[str] = None
    page: Optional[int] = None
    per_page: Optional[int] = None
    cursor: Optional[str] = None
    select: Optional[str] = None
    sample: Optional[int] = None
    seed: Optional[int] = None
    group_by: Optional[str] = None
    mailto: Optional[str] = Field(None, description="Contact email for the polite pool")


# ─── Response envelopes ──────────────────────────────────────────────────────


class _Envelope(BaseModel):
    """Lenient envelope: unknown upstream fields are kept as-is."""

    model_config = ConfigDict(extra="allow")


class Meta(_Envelope):
    count: Optional[int] = None
    db_response_time_ms: Optional[int] = None
    page: Optional[int] = None
    per_page: Optional[int] = None
    next_cursor: Optional[str] = None
    groups_count: Optional[int] = None


class ListEnvelope(_Envelope):
    """Paginated list of entities."""

    meta: Meta = Field(default_factory=Meta)
    results: list[dict[str, Any]] = Field(default_factory=list)


class GroupByBucket(_Envelope):
    key: Optional[str] = None
    key_display_name: Optional[str] = None
    count: Optional[int] = None


class GroupByEnvelope(_Envelope):
    """Counts per distinct value of the grouped field."""

    meta: Meta = Field(default_factory=Meta)
    group_by: list[GroupByBucket] = Field(default_factory=list)


class AutocompleteSuggestion(_Envelope):
    id: Optional[str] = None
    display_name: Optional[str] = None
    hint: Optional[str] = None
    cited_by_count: Optional[int] = None
    works_count: Optional[int] = None
    entity_type: Optional[str] = None
    external_id: Optional[str] = None


class AutocompleteEnvelope(_Envelope):
    """Ranked short-form suggestions for partial query text."""

    results: list[AutocompleteSuggestion] = Field(default_factory=list)
    meta: Meta = Field(default_factory=Meta)


# ─── Errors and results ──────────────────────────────────────────────────────


class ErrorKind(str, Enum):
    """Why an upstream call did not produce a payload."""

    TIMEOUT = "timeout"
    HTTP = "http"
    TRANSPORT = "transport"
    DECODE = "decode"


class UpstreamError(BaseModel):
    """A failed upstream call, passed to the boundary unchanged."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    status_code: Optional[int] = None
    body: Optional[str] = None


class OpenAlexError(Exception):
    """Raised by ``Err.unwrap()`` for callers that prefer exceptions."""

    def __init__(self, error: UpstreamError):
        super().__init__(error.message)
        self.error = error

    @property
    def status_code(self) -> Optional[int]:
        return self.error.status_code

    @property
    def response_body(self) -> Optional[str]:
        return self.error.body


class Ok(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["ok"] = "ok"
    value: Any

    def unwrap(self) -> Any:
        return self.value


class Err(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["err"] = "err"
    error: UpstreamError

    def unwrap(self) -> Any:
        raise OpenAlexError(self.error)
