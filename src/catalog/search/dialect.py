"""Text-search primitives as each supported database spells them.

Every template returned here carries exactly one ``{}`` slot, which the
query assembly turns into a bound parameter holding the sanitized query.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod

from catalog.search.locale import Locale

MAX_QUERY_TERMS = 32

_TERM = re.compile(r"\w+", re.UNICODE)


def query_terms(text: str | None) -> list[str]:
    if not text:
        return []
    return _TERM.findall(text.casefold())


def sanitize_query(phrase: str | None) -> str:
    """Reduce a raw phrase to space-separated word terms.

    Punctuation and operators are dropped, so the result is always safe to
    hand to a plain-text query parser. Returns ``""`` when nothing searchable
    remains.
    """
    return " ".join(query_terms(phrase)[:MAX_QUERY_TERMS])


class TextSearchDialect(ABC):
    name: str

    @abstractmethod
    def match_score(self, expression: str, locale: Locale) -> str:
        """Template scoring *expression* against the bound query (float)."""

    @abstractmethod
    def text_match(self, expression: str, locale: Locale) -> str:
        """Template that is true when *expression* matches the bound query."""

    def concat(self, expressions: list[str]) -> str:
        return " || ' ' || ".join(f"COALESCE({e}, '')" for e in expressions)


class SqliteTextSearch(TextSearchDialect):
    """Uses the ``match_score``/``text_match`` functions registered per connection."""

    name = "sqlite"

    def match_score(self, expression: str, locale: Locale) -> str:
        return f"match_score({expression}, {{}})"

    def text_match(self, expression: str, locale: Locale) -> str:
        return f"text_match({expression}, {{}}) = 1"


class PostgresTextSearch(TextSearchDialect):
    name = "postgresql"

    _CONFIGS: dict[Locale, str] = {
        Locale.EN: "english",
        Locale.ES: "spanish",
    }

    def _config(self, locale: Locale) -> str:
        return self._CONFIGS[locale]

    def match_score(self, expression: str, locale: Locale) -> str:
        cfg = self._config(locale)
        return f"ts_rank(to_tsvector('{cfg}', {expression}), plainto_tsquery('{cfg}', {{}}))"

    def text_match(self, expression: str, locale: Locale) -> str:
        cfg = self._config(locale)
        return f"to_tsvector('{cfg}', {expression}) @@ plainto_tsquery('{cfg}', {{}})"


_DIALECTS: dict[str, type[TextSearchDialect]] = {
    "sqlite": SqliteTextSearch,
    "postgresql": PostgresTextSearch,
}


def dialect_for(name: str) -> TextSearchDialect:
    try:
        return _DIALECTS[name]()
    except KeyError:
        raise ValueError(f"No text-search support for database dialect {name!r}") from None
