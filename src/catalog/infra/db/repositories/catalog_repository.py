"""Suggestions and filter facets over the published catalog."""
from __future__ import annotations

from typing import Mapping

from sqlmodel import Session

from catalog.infra.db.repositories.search_repository import run_bound
from catalog.search.dialect import dialect_for
from catalog.search.entities import EntityDescriptor
from catalog.search.executor import Clock, utcnow
from catalog.search.fields import FieldResolver, validate_identifier
from catalog.search.locale import BASE_LOCALE, Locale
from catalog.search.predicates import (
    Predicate,
    PredicateBuilder,
    PredicateFragment,
    assemble,
    contains_fragment,
)


class CatalogRepository:
    def __init__(
        self,
        session: Session,
        entities: Mapping[str, EntityDescriptor],
        *,
        clock: Clock = utcnow,
    ) -> None:
        self._s = session
        self._entities = entities
        self._clock = clock
        self._dialect = dialect_for(session.get_bind().dialect.name)
        self._resolver = FieldResolver()

    def _standing(self, entity: EntityDescriptor, locale: Locale = BASE_LOCALE) -> list[PredicateFragment]:
        builder = PredicateBuilder(
            entity, locale, self._dialect, now=self._clock(), resolver=self._resolver,
        )
        return list(builder.fragments)

    def suggest_titles(self, needle: str, locale: Locale, limit: int) -> list[str]:
        """Distinct localized titles containing *needle*, across every entity."""
        parts: list[str | PredicateFragment] = ["SELECT title FROM ("]
        for i, entity in enumerate(self._entities.values()):
            title = self._resolver.resolve(entity.field("title"), locale)
            predicate = Predicate(tuple(self._standing(entity, locale)) + (contains_fragment(title, needle),))
            if i:
                parts.append("UNION")
            parts += [f"SELECT {title} AS title FROM {entity.table} WHERE", predicate.as_fragment()]
        parts += [") AS suggestions ORDER BY title", PredicateFragment("LIMIT {}", (limit,))]
        return run_bound(self._s, assemble(parts), lambda r: [row[0] for row in r.all()])

    def distinct_values(self, entity_name: str, column: str) -> list[str]:
        entity = self._entities[entity_name]
        validate_identifier(column)
        predicate = Predicate(tuple(self._standing(entity)) + (PredicateFragment(f"{column} IS NOT NULL"),))
        query = assemble([
            f"SELECT DISTINCT LOWER({column}) AS value FROM {entity.table} WHERE",
            predicate.as_fragment(),
            "ORDER BY value",
        ])
        return run_bound(self._s, query, lambda r: [row[0] for row in r.all()])

    def price_range(self, entity_name: str | None = None) -> tuple[float, float]:
        names = [entity_name] if entity_name else list(self._entities)
        parts: list[str | PredicateFragment] = ["SELECT MIN(price), MAX(price) FROM ("]
        for i, name in enumerate(names):
            entity = self._entities[name]
            if i:
                parts.append("UNION ALL")
            parts += [
                f"SELECT price FROM {entity.table} WHERE",
                Predicate(tuple(self._standing(entity))).as_fragment(),
            ]
        parts.append(") AS prices")
        low, high = run_bound(self._s, assemble(parts), lambda r: r.one())
        return float(low or 0), float(high or 0)
