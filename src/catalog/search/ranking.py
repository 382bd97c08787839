"""Relevance expressions: weighted per-field match scores."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from catalog.search.dialect import TextSearchDialect
from catalog.search.fields import FieldResolver, FieldSpec
from catalog.search.locale import Locale
from catalog.search.predicates import SLOT, PredicateFragment

DEFAULT_NO_PHRASE_RELEVANCE = 1.0


@dataclass(frozen=True, slots=True)
class RelevanceExpression:
    template: str
    slots: int = 0

    @property
    def constant(self) -> bool:
        return self.slots == 0

    def bind(self, query: str | None) -> PredicateFragment:
        """Attach the sanitized query, one copy per match-score slot."""
        if self.constant:
            return PredicateFragment(self.template)
        if not query:
            raise ValueError("A phrase-dependent relevance needs a non-empty query")
        return PredicateFragment(self.template, (query,) * self.slots)


class RankingComposer:
    def __init__(
        self,
        dialect: TextSearchDialect,
        *,
        no_phrase_relevance: float = DEFAULT_NO_PHRASE_RELEVANCE,
        resolver: FieldResolver | None = None,
    ) -> None:
        self._dialect = dialect
        self._resolver = resolver or FieldResolver()
        if not math.isfinite(no_phrase_relevance):
            raise ValueError("no_phrase_relevance must be a finite number")
        self._constant = RelevanceExpression(repr(float(no_phrase_relevance)))
        self._cache: dict[tuple[tuple[FieldSpec, ...], Locale], RelevanceExpression] = {}

    def compose(
        self, fields: Sequence[FieldSpec], has_phrase: bool, locale: Locale,
    ) -> RelevanceExpression:
        if not has_phrase:
            return self._constant
        key = (tuple(fields), locale)
        cached = self._cache.get(key)
        if cached is None:
            cached = self._cache[key] = self._weighted(fields, locale)
        return cached

    def _weighted(self, fields: Sequence[FieldSpec], locale: Locale) -> RelevanceExpression:
        terms = [
            f"{float(f.weight)!r} * {self._dialect.match_score(self._resolver.resolve(f, locale), locale)}"
            for f in fields
            if f.ranked
        ]
        if not terms:
            return self._constant
        template = "(" + " + ".join(terms) + ")"
        return RelevanceExpression(template, template.count(SLOT))
