"""Search use-case service. Owns engine→DTO mapping; routers never see raw rows."""
from __future__ import annotations
from functools import lru_cache
from catalog.config import settings
from catalog.domain.exceptions import InvalidRequest
from catalog.infra.db.uow import UnitOfWork
from catalog.infra.db.repositories.catalog_repository import CatalogRepository
from catalog.infra.db.repositories.search_repository import SearchRepository
from catalog.api.schemas.search import (
    EntityType, FacetsRead, PriceRange, SearchQuery, SearchResponse, SuggestionList,
)
from catalog.logging import logger
from catalog.search import EntityDescriptor, PagedQueryExecutor, RankingComposer, SearchRequest, build_entities
from catalog.search.dialect import dialect_for
from catalog.search.executor import Clock, utcnow
from catalog.search.locale import parse_locale

MAX_SUGGESTIONS = 20


@lru_cache(maxsize=1)
def default_entities() -> dict[str, EntityDescriptor]:
    return build_entities(
        title_weight=settings.SEARCH_TITLE_WEIGHT,
        description_weight=settings.SEARCH_DESCRIPTION_WEIGHT,
        location_weight=settings.SEARCH_LOCATION_WEIGHT,
    )


@lru_cache(maxsize=None)
def ranking_composer(dialect_name: str, no_phrase_relevance: float) -> RankingComposer:
    return RankingComposer(dialect_for(dialect_name), no_phrase_relevance=no_phrase_relevance)


class SearchService:
    def __init__(
        self,
        uow: UnitOfWork,
        entities: dict[str, EntityDescriptor] | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._uow = uow
        self._entities = entities if entities is not None else default_entities()
        self._clock = clock

    def _executor(self) -> PagedQueryExecutor:
        storage = SearchRepository(self._uow.session)
        return PagedQueryExecutor(
            storage,
            max_limit=settings.SEARCH_MAX_LIMIT,
            composer=ranking_composer(storage.dialect.name, settings.SEARCH_NO_PHRASE_RELEVANCE),
            clock=self._clock,
        )

    def search(self, payload: SearchQuery) -> SearchResponse:
        request = SearchRequest(
            phrase=payload.phrase,
            filters=dict(payload.filters),
            locale=payload.locale,
            limit=payload.limit if payload.limit is not None else settings.SEARCH_DEFAULT_LIMIT,
            offset=payload.offset,
            include_past=payload.include_past,
        )
        executor = self._executor()
        if payload.type is None:
            page = executor.execute_many(request, list(self._entities.values()))
        else:
            page = executor.execute(request, self._entities[payload.type.value])

        logger.info(
            "Search type=%s total=%d returned=%d",
            payload.type.value if payload.type else "all", page.total, len(page.items),
        )
        return SearchResponse(
            items=page.items,
            total=page.total,
            limit=page.limit,
            offset=page.offset,
            has_more=page.has_more,
        )

    def suggest(self, needle: str, locale: str = "en", limit: int = 5) -> SuggestionList:
        resolved = parse_locale(locale)
        if not 1 <= limit <= MAX_SUGGESTIONS:
            raise InvalidRequest(f"limit must be between 1 and {MAX_SUGGESTIONS}, got {limit}")
        needle = needle.strip()
        if len(needle) < settings.SUGGESTION_MIN_LENGTH:
            return SuggestionList(items=[])
        repo = CatalogRepository(self._uow.session, self._entities, clock=self._clock)
        return SuggestionList(items=repo.suggest_titles(needle, resolved, limit))

    def facets(self, entity_type: EntityType | None = None) -> FacetsRead:
        repo = CatalogRepository(self._uow.session, self._entities, clock=self._clock)
        low, high = repo.price_range(entity_type.value if entity_type else None)
        return FacetsRead(
            levels=repo.distinct_values("course", "level"),
            product_types=repo.distinct_values("product", "product_type"),
            price_range=PriceRange(min=low, max=high),
        )
