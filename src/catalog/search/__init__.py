"""Catalog query composition and ranking."""

from catalog.search.entities import EntityDescriptor, build_entities
from catalog.search.executor import Page, PagedQueryExecutor, SearchPlan, SearchRequest, SearchStorage
from catalog.search.fields import FieldKind, FieldResolver, FieldSpec
from catalog.search.locale import Locale, parse_locale
from catalog.search.predicates import BoundQuery, PredicateBuilder, PredicateFragment
from catalog.search.ranking import RankingComposer, RelevanceExpression

__all__ = [
    "BoundQuery",
    "EntityDescriptor",
    "FieldKind",
    "FieldResolver",
    "FieldSpec",
    "Locale",
    "Page",
    "PagedQueryExecutor",
    "PredicateBuilder",
    "PredicateFragment",
    "RankingComposer",
    "RelevanceExpression",
    "SearchPlan",
    "SearchRequest",
    "SearchStorage",
    "build_entities",
    "parse_locale",
]
