"""Searchable/displayable entity fields and locale fallback resolution."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Iterable

from catalog.search.locale import Locale, parse_locale

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")

# Column suffix holding each non-base translation, e.g. title -> title_es.
_TRANSLATION_SUFFIX: dict[Locale, str] = {
    Locale.ES: "es",
}


def validate_identifier(name: str) -> str:
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


class FieldKind(str, Enum):
    TEXT = "text"
    NUMERIC = "numeric"
    DATE = "date"
    ENUM = "enum"


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One entity field available for search and display."""

    name: str
    kind: FieldKind = FieldKind.TEXT
    localizable: bool = False
    weight: float = 0.0
    column: str | None = None

    def __post_init__(self) -> None:
        validate_identifier(self.name)
        validate_identifier(self.base_column)
        if self.weight < 0:
            raise ValueError(f"Field {self.name!r}: weight must be >= 0")
        if self.weight and self.kind is not FieldKind.TEXT:
            raise ValueError(f"Field {self.name!r}: only text fields can carry a weight")
        if self.localizable and self.kind is not FieldKind.TEXT:
            raise ValueError(f"Field {self.name!r}: only text fields can be localizable")

    @property
    def base_column(self) -> str:
        return self.column or self.name

    @property
    def ranked(self) -> bool:
        return self.kind is FieldKind.TEXT and self.weight > 0


@lru_cache(maxsize=None)
def _variants(field: FieldSpec) -> dict[Locale, str]:
    base = field.base_column
    variants = {loc: base for loc in Locale}
    if field.localizable:
        for loc, suffix in _TRANSLATION_SUFFIX.items():
            translated = validate_identifier(f"{base}_{suffix}")
            variants[loc] = f"COALESCE(NULLIF({translated}, ''), {base})"
    return variants


class FieldResolver:
    """Selects the SQL expression for a field in a given locale.

    Expressions are precomputed per field from validated identifiers; the
    locale only picks one of them.
    """

    def resolve(self, field: FieldSpec, locale: Locale | str) -> str:
        """Raises UnsupportedLocale for values outside the enumeration."""
        return _variants(field)[parse_locale(locale)]

    def resolve_all(self, fields: Iterable[FieldSpec], locale: Locale | str) -> dict[str, str]:
        return {f.name: self.resolve(f, locale) for f in fields}

