"""MCP research tools over OpenAlex.

Every tool returns text: pretty-printed JSON on success, a descriptive error
message on failure. Search tools default to a concise field selection.
"""

from __future__ import annotations

from typing import Optional

from . import handlers
from .config import Settings
from .core.clients.openalex import OpenAlexFetcher
from .core.models import EntityType, QueryOptions

CONCISE_FIELDS: dict[EntityType, str] = {
    EntityType.WORKS: "id,doi,display_name,publication_year,publication_date,authorships,open_access,cited_by_count,primary_topic,biblio",
    EntityType.AUTHORS: "id,display_name,orcid,works_count,cited_by_count,last_known_institutions",
    EntityType.INSTITUTIONS: "id,display_name,country_code,works_count,cited_by_count,type",
    EntityType.SOURCES: "id,display_name,type,host_organization_name,works_count,cited_by_count,is_oa,country_code",
}

DEFAULT_PER_PAGE = 10


class ResearchTools:
    """Tool implementations bound to one fetcher and one settings value."""

    def __init__(self, fetcher: OpenAlexFetcher, settings: Settings):
        self.fetcher = fetcher
        self.settings = settings

    async def _search(
        self,
        entity_type: EntityType,
        query: str,
        filter: Optional[str],
        sort: Optional[str],
        per_page: int,
        verbose: bool,
    ) -> str:
        options = QueryOptions(
            search=query,
            filter=filter,
            sort=sort,
            per_page=per_page,
            select=None if verbose else CONCISE_FIELDS[entity_type],
        )
        result = await handlers.list_entities(self.fetcher, self.settings, entity_type, options)
        return handlers.render_tool_result(result)

    async def _get(self, entity_type: EntityType, entity_id: str) -> str:
        result = await handlers.get_entity(self.fetcher, self.settings, entity_type, entity_id)
        return handlers.render_tool_result(result)

    async def search_works(
        self,
        query: str,
        filter: Optional[str] = None,
        sort: Optional[str] = None,
        per_page: int = DEFAULT_PER_PAGE,
        verbose: bool = False,
    ) -> str:
        """Search scholarly works (papers, articles, books, datasets).

        Args:
            query: Search query for works.
            filter: Filter string, e.g. 'publication_year:2023,is_oa:true'.
            sort: Sort field, e.g. 'cited_by_count:desc'.
            per_page: Results per page (default 10, max 200).
            verbose: Return full records instead of a concise field selection.
        """
        return await self._search(EntityType.WORKS, query, filter, sort, per_page, verbose)

    async def search_authors(
        self,
        query: str,
        filter: Optional[str] = None,
        sort: Optional[str] = None,
        per_page: int = DEFAULT_PER_PAGE,
        verbose: bool = False,
    ) -> str:
        """Search authors.

        Args:
            query: Search query for authors.
            filter: Filter string, e.g. 'last_known_institutions.id:I136199984'.
            sort: Sort field, e.g. 'works_count:desc'.
            per_page: Results per page (default 10, max 200).
            verbose: Return full records instead of a concise field selection.
        """
        return await self._search(EntityType.AUTHORS, query, filter, sort, per_page, verbose)

    async def search_institutions(
        self,
        query: str,
        filter: Optional[str] = None,
        sort: Optional[str] = None,
        per_page: int = DEFAULT_PER_PAGE,
        verbose: bool = False,
    ) -> str:
        """Search institutions (universities, research institutes).

        Args:
            query: Search query for institutions.
            filter: Filter string, e.g. 'country_code:US'.
            sort: Sort field, e.g. 'works_count:desc'.
            per_page: Results per page (default 10, max 200).
            verbose: Return full records instead of a concise field selection.
        """
        return await self._search(EntityType.INSTITUTIONS, query, filter, sort, per_page, verbose)

    async def search_sources(
        self,
        query: str,
        filter: Optional[str] = None,
        sort: Optional[str] = None,
        per_page: int = DEFAULT_PER_PAGE,
        verbose: bool = False,
    ) -> str:
        """Search sources (journals, repositories, conferences).

        Args:
            query: Search query for sources.
            filter: Filter string, e.g. 'type:journal' or 'is_oa:true'.
            sort: Sort field, e.g. 'works_count:desc'.
            per_page: Results per page (default 10, max 200).
            verbose: Return full records instead of a concise field selection.
        """
        return await self._search(EntityType.SOURCES, query, filter, sort, per_page, verbose)

    async def get_work_by_id(self, work_id: str) -> str:
        """Full record for one work.

        Args:
            work_id: OpenAlex work ID (e.g. 'W2741809807') or DOI.
        """
        return await self._get(EntityType.WORKS, work_id)

    async def get_author_by_id(self, author_id: str) -> str:
        """Full record for one author.

        Args:
            author_id: OpenAlex author ID (e.g. 'A5027479191') or ORCID.
        """
        return await self._get(EntityType.AUTHORS, author_id)

    async def get_source_by_id(self, source_id: str) -> str:
        """Full record for one source.

        Args:
            source_id: OpenAlex source ID (e.g. 'S137773608') or ISSN.
        """
        return await self._get(EntityType.SOURCES, source_id)

    async def autocomplete_entities(self, entity: str, query: str) -> str:
        """Fast typeahead suggestions for a partial name or title.

        Args:
            entity: One of works, authors, sources, institutions, topics, publishers, funders, keywords, geo.
            query: Partial text to complete, e.g. 'darwin'.
        """
        try:
            entity_type = EntityType(entity)
        except ValueError:
            return f"Error: unknown entity '{entity}'. Valid entities: {', '.join(EntityType.values())}"
        result = await handlers.autocomplete(self.fetcher, self.settings, entity_type, query)
        return handlers.render_tool_result(result)

    async def group_entities(self, entity: str, group_by: str, filter: Optional[str] = None) -> str:
        """Count entities per distinct value of a field.

        Args:
            entity: One of works, authors, sources, institutions, topics, publishers, funders, keywords, geo.
            group_by: Field to group on, e.g. 'type' or 'open_access.oa_status'.
            filter: Optional filter string applied before grouping.
        """
        try:
            entity_type = EntityType(entity)
        except ValueError:
            return f"Error: unknown entity '{entity}'. Valid entities: {', '.join(EntityType.values())}"
        options = QueryOptions(group_by=group_by, filter=filter)
        result = await handlers.list_entities(self.fetcher, self.settings, entity_type, options)
        return handlers.render_tool_result(result)
