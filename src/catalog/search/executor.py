"""Paged, relevance-ordered catalog search.

A request becomes two statements sharing one predicate: a COUNT for the
total and an ordered, limited SELECT for the page. Both are built, and every
input validated, before the storage collaborator is called.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Protocol, Sequence

from catalog.domain.exceptions import InvalidFilterValue, InvalidRequest
from catalog.logging import logger
from catalog.search.dialect import TextSearchDialect
from catalog.search.entities import EntityDescriptor
from catalog.search.fields import FieldResolver
from catalog.search.locale import BASE_LOCALE, Locale, parse_locale
from catalog.search.predicates import (
    BoundQuery,
    PredicateBuilder,
    PredicateFragment,
    assemble,
    where_clause,
)
from catalog.search.ranking import DEFAULT_NO_PHRASE_RELEVANCE, RankingComposer

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MERGE_SORT_KEYS = ("title",)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SearchRequest:
    phrase: str | None = None
    filters: Mapping[str, Any] = field(default_factory=dict)
    locale: Locale | str = BASE_LOCALE
    limit: int = DEFAULT_LIMIT
    offset: int = 0
    include_past: bool = False


@dataclass(frozen=True, slots=True)
class SearchPlan:
    entity: EntityDescriptor
    locale: Locale
    query: str
    count: BoundQuery
    data: BoundQuery


@dataclass
class Page:
    items: list[dict[str, Any]]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total


class SearchStorage(Protocol):
    """What the executor needs from the database."""

    dialect: TextSearchDialect

    def count(self, query: BoundQuery) -> int: ...

    def fetch(self, query: BoundQuery) -> list[dict[str, Any]]: ...


def _merge_key(item: Mapping[str, Any]) -> tuple:
    return (-item["relevance"], item["title"], item["type"], item["id"])


class PagedQueryExecutor:
    def __init__(
        self,
        storage: SearchStorage,
        *,
        max_limit: int = MAX_LIMIT,
        no_phrase_relevance: float = DEFAULT_NO_PHRASE_RELEVANCE,
        composer: RankingComposer | None = None,
        resolver: FieldResolver | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._storage = storage
        self._max_limit = max_limit
        self._resolver = resolver or FieldResolver()
        self._composer = composer or RankingComposer(
            storage.dialect, no_phrase_relevance=no_phrase_relevance, resolver=self._resolver,
        )
        self._clock = clock

    # --- validation ---

    def check_bounds(self, request: SearchRequest) -> None:
        limit, offset = request.limit, request.offset
        if not isinstance(limit, int) or isinstance(limit, bool):
            raise InvalidRequest(f"limit must be an integer, got {limit!r}")
        if not isinstance(offset, int) or isinstance(offset, bool):
            raise InvalidRequest(f"offset must be an integer, got {offset!r}")
        if not 1 <= limit <= self._max_limit:
            raise InvalidRequest(f"limit must be between 1 and {self._max_limit}, got {limit}")
        if offset < 0:
            raise InvalidRequest(f"offset must be >= 0, got {offset}")

    # --- planning ---

    def plan(self, request: SearchRequest, entity: EntityDescriptor) -> SearchPlan:
        """Validate *request* and build both statements without touching storage."""
        self.check_bounds(request)
        locale = parse_locale(request.locale)
        return self._plan(
            request, entity, locale, request.filters, limit=request.limit, offset=request.offset,
        )

    def _plan(
        self,
        request: SearchRequest,
        entity: EntityDescriptor,
        locale: Locale,
        filters: Mapping[str, Any],
        *,
        limit: int,
        offset: int,
        sort_keys: tuple[str, ...] | None = None,
    ) -> SearchPlan:
        builder = PredicateBuilder(
            entity,
            locale,
            self._storage.dialect,
            now=self._clock(),
            include_past=request.include_past,
            resolver=self._resolver,
        )
        builder.add_filters(filters)
        query = builder.add_phrase(request.phrase)
        where = where_clause(builder.build())
        relevance = self._composer.compose(entity.fields, bool(query), locale)

        columns = self._resolver.resolve_all(entity.fields, locale)
        projection = ", ".join(f"{expr} AS {name}" for name, expr in columns.items())
        order = ", ".join(
            ["relevance DESC"]
            + [f"{columns[key]} ASC" for key in (sort_keys or entity.sort_keys)]
            + [f"{entity.id_column} ASC"]
        )

        count = assemble([f"SELECT COUNT(*) AS total FROM {entity.table}", *where])
        data = assemble([
            f"SELECT {projection},",
            relevance.bind(query),
            f"AS relevance FROM {entity.table}",
            *where,
            f"ORDER BY {order}",
            PredicateFragment("LIMIT {} OFFSET {}", (limit, offset)),
        ])
        return SearchPlan(entity=entity, locale=locale, query=query, count=count, data=data)

    # --- execution ---

    def execute(self, request: SearchRequest, entity: EntityDescriptor) -> Page:
        plan = self.plan(request, entity)
        total, items = self._run(plan)
        logger.debug(
            "search entity=%s locale=%s params=%d total=%d returned=%d",
            entity.name, plan.locale.value, len(plan.data.values), total, len(items),
        )
        return Page(items=items, total=total, limit=request.limit, offset=request.offset)

    def execute_many(
        self, request: SearchRequest, entities: Sequence[EntityDescriptor],
    ) -> Page:
        """Search several entity types and merge them into one page.

        Every entity is ordered by relevance, title and id, and asked for its
        first ``offset + limit`` rows, which therefore contain its share of
        the merged window. Rows merge by relevance, then title, type and id.
        """
        self.check_bounds(request)
        locale = parse_locale(request.locale)
        known = frozenset().union(*(e.filter_names for e in entities))
        unknown = sorted(set(request.filters) - known)
        if unknown:
            raise InvalidFilterValue(
                f"Unknown filter(s): {', '.join(unknown)}", filter_name=unknown[0],
            )

        window = request.offset + request.limit
        plans = [
            self._plan(
                request,
                entity,
                locale,
                {k: v for k, v in request.filters.items() if k in entity.filter_names},
                limit=window,
                offset=0,
                sort_keys=MERGE_SORT_KEYS,
            )
            for entity in entities
        ]

        total = 0
        merged: list[dict[str, Any]] = []
        for plan in plans:
            count, items = self._run(plan)
            total += count
            merged.extend(items)
        merged.sort(key=_merge_key)
        items = merged[request.offset:window]
        logger.debug(
            "search entities=%s locale=%s total=%d returned=%d",
            ",".join(e.name for e in entities), locale.value, total, len(items),
        )
        return Page(items=items, total=total, limit=request.limit, offset=request.offset)

    def _run(self, plan: SearchPlan) -> tuple[int, list[dict[str, Any]]]:
        total = self._storage.count(plan.count)
        rows = self._storage.fetch(plan.data)
        items = []
        for row in rows:
            item = dict(row)
            item["relevance"] = float(item["relevance"])
            item["type"] = plan.entity.name
            items.append(item)
        return total, items
