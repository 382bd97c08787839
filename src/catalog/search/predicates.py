"""Filter predicates and positional query assembly.

Fragments carry their own values. Numbering happens only once, when
:func:`assemble` flattens the pieces of a complete statement, so adding or
skipping a condition can never shift another condition's parameters.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from catalog.domain.exceptions import InvalidFilterValue
from catalog.search.dialect import TextSearchDialect, sanitize_query
from catalog.search.fields import FieldResolver, validate_identifier
from catalog.search.locale import Locale

if TYPE_CHECKING:
    from catalog.search.entities import EntityDescriptor

SLOT = "{}"


@dataclass(frozen=True, slots=True)
class PredicateFragment:
    """One condition template plus the values its ``{}`` slots consume."""

    template: str
    values: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        slots = self.template.count(SLOT)
        if slots != len(self.values):
            raise ValueError(
                f"Fragment has {slots} slot(s) but {len(self.values)} value(s): {self.template!r}"
            )


@dataclass(frozen=True, slots=True)
class Predicate:
    fragments: tuple[PredicateFragment, ...]

    @property
    def template(self) -> str:
        return " AND ".join(f"({f.template})" for f in self.fragments)

    @property
    def values(self) -> tuple[Any, ...]:
        return tuple(v for f in self.fragments for v in f.values)

    def as_fragment(self) -> PredicateFragment:
        return PredicateFragment(self.template, self.values)


@dataclass(frozen=True, slots=True)
class BoundQuery:
    """Final statement text with ``:p1 … :pN`` placeholders in textual order."""

    sql: str
    values: tuple[Any, ...]

    @property
    def params(self) -> dict[str, Any]:
        return {placeholder(i): v for i, v in enumerate(self.values, start=1)}


def placeholder(index: int) -> str:
    return f"p{index}"


def assemble(parts: Iterable[str | PredicateFragment]) -> BoundQuery:
    sql: list[str] = []
    values: list[Any] = []
    for part in parts:
        if isinstance(part, str):
            sql.append(part)
            continue
        start = len(values) + 1
        names = [f":{placeholder(start + i)}" for i in range(len(part.values))]
        sql.append(part.template.format(*names))
        values.extend(part.values)
    return BoundQuery(sql=" ".join(s for s in sql if s), values=tuple(values))


class FilterOp(str, Enum):
    GTE = "gte"
    LTE = "lte"
    EQ = "eq"
    CONTAINS = "contains"


class FilterKind(str, Enum):
    NUMERIC = "numeric"
    DATE = "date"
    ENUM = "enum"
    TEXT = "text"


@dataclass(frozen=True, slots=True)
class FilterSpec:
    name: str
    column: str
    op: FilterOp
    kind: FilterKind
    choices: tuple[str, ...] = ()
    minimum: float | None = None
    pairs_with: str | None = None

    def __post_init__(self) -> None:
        validate_identifier(self.column)
        if self.kind is FilterKind.ENUM and not self.choices:
            raise ValueError(f"Enum filter {self.name!r} needs choices")


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _coerce_numeric(spec: FilterSpec, value: Any) -> float | int:
    if isinstance(value, Decimal):
        value = float(value)
    if isinstance(value, bool):
        raise InvalidFilterValue(f"{spec.name} must be a number", filter_name=spec.name)
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise InvalidFilterValue(
                f"{spec.name} must be a number, got {value!r}", filter_name=spec.name
            ) from None
    if not isinstance(value, (int, float, Decimal)):
        raise InvalidFilterValue(f"{spec.name} must be a number", filter_name=spec.name)
    if not math.isfinite(float(value)):
        raise InvalidFilterValue(f"{spec.name} must be finite", filter_name=spec.name)
    if spec.minimum is not None and value < spec.minimum:
        raise InvalidFilterValue(
            f"{spec.name} must be >= {spec.minimum:g}", filter_name=spec.name
        )
    return value


def _coerce_date(spec: FilterSpec, value: Any) -> datetime:
    if isinstance(value, str):
        raw = value.strip()
        try:
            value = date.fromisoformat(raw) if len(raw) == 10 else datetime.fromisoformat(raw)
        except ValueError:
            raise InvalidFilterValue(
                f"{spec.name} must be an ISO-8601 date, got {value!r}", filter_name=spec.name
            ) from None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        # A bare date as an upper bound covers the whole day.
        bound = time.max if spec.op is FilterOp.LTE else time.min
        return datetime.combine(value, bound)
    raise InvalidFilterValue(f"{spec.name} must be a date", filter_name=spec.name)


def _coerce_enum(spec: FilterSpec, value: Any) -> str:
    raw = value.value if isinstance(value, Enum) else value
    normalized = raw.strip().lower() if isinstance(raw, str) else None
    if normalized not in spec.choices:
        raise InvalidFilterValue(
            f"Invalid {spec.name} {value!r}; expected one of: {', '.join(spec.choices)}",
            filter_name=spec.name,
        )
    return normalized


def _coerce_text(spec: FilterSpec, value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidFilterValue(f"{spec.name} must be a string", filter_name=spec.name)
    return value.strip()


_COERCERS = {
    FilterKind.NUMERIC: _coerce_numeric,
    FilterKind.DATE: _coerce_date,
    FilterKind.ENUM: _coerce_enum,
    FilterKind.TEXT: _coerce_text,
}


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_fragment(expression: str, needle: str) -> PredicateFragment:
    return PredicateFragment(
        f"LOWER({expression}) LIKE {SLOT} ESCAPE '\\'",
        (f"%{escape_like(needle.lower())}%",),
    )


class PredicateBuilder:
    """Accumulates the WHERE conditions of one search request.

    The entity's standing conditions (published, not soft-deleted, not
    elapsed) are always emitted first.
    """

    def __init__(
        self,
        entity: "EntityDescriptor",
        locale: Locale,
        dialect: TextSearchDialect,
        *,
        now: datetime,
        include_past: bool = False,
        resolver: FieldResolver | None = None,
    ) -> None:
        self._entity = entity
        self._locale = locale
        self._dialect = dialect
        self._resolver = resolver or FieldResolver()
        self._filters = {spec.name: spec for spec in entity.filters}
        self._fragments: list[PredicateFragment] = []
        self._query = ""
        self._add_standing(now, include_past)

    def _add_standing(self, now: datetime, include_past: bool) -> None:
        entity = self._entity
        self._fragments.append(PredicateFragment(f"{entity.published_column} = {SLOT}", (True,)))
        if entity.deleted_column:
            self._fragments.append(PredicateFragment(f"{entity.deleted_column} IS NULL"))
        if entity.elapsed_column and not include_past:
            if now.tzinfo is not None:
                now = now.astimezone(timezone.utc).replace(tzinfo=None)
            self._fragments.append(PredicateFragment(f"{entity.elapsed_column} >= {SLOT}", (now,)))

    @property
    def query(self) -> str:
        """Sanitized search query, ``""`` when no text filter was added."""
        return self._query

    @property
    def fragments(self) -> tuple[PredicateFragment, ...]:
        return tuple(self._fragments)

    def _spec(self, name: str) -> FilterSpec:
        try:
            return self._filters[name]
        except KeyError:
            raise InvalidFilterValue(
                f"Unknown filter {name!r} for {self._entity.name}", filter_name=name
            ) from None

    def coerce(self, name: str, value: Any) -> Any:
        """Validate *value* for filter *name*; ``None`` means absent."""
        spec = self._spec(name)
        if _is_absent(value):
            return None
        return _COERCERS[spec.kind](spec, value)

    def add_filter(self, name: str, value: Any) -> None:
        spec = self._spec(name)
        coerced = self.coerce(name, value)
        if coerced is None:
            return
        self._fragments.append(self._fragment(spec, coerced))

    def add_filters(self, filters: Mapping[str, Any]) -> None:
        """Validate every filter, then emit fragments in the entity's declared order."""
        coerced = {name: self.coerce(name, value) for name, value in filters.items()}
        for name, value in coerced.items():
            spec = self._filters[name]
            other = coerced.get(spec.pairs_with) if spec.pairs_with else None
            if value is None or other is None or spec.op is not FilterOp.GTE:
                continue
            if value > other:
                raise InvalidFilterValue(
                    f"{name} must not exceed {spec.pairs_with}", filter_name=name
                )
        for spec in self._entity.filters:
            value = coerced.get(spec.name)
            if value is not None:
                self._fragments.append(self._fragment(spec, value))

    def _fragment(self, spec: FilterSpec, value: Any) -> PredicateFragment:
        if spec.op is FilterOp.GTE:
            return PredicateFragment(f"{spec.column} >= {SLOT}", (value,))
        if spec.op is FilterOp.LTE:
            return PredicateFragment(f"{spec.column} <= {SLOT}", (value,))
        if spec.op is FilterOp.CONTAINS:
            return contains_fragment(spec.column, value)
        return PredicateFragment(f"LOWER({spec.column}) = {SLOT}", (str(value).lower(),))

    def add_phrase(self, phrase: str | None) -> str:
        query = sanitize_query(phrase)
        if not query:
            return ""
        expressions = [self._resolver.resolve(f, self._locale) for f in self._entity.ranked_fields]
        template = self._dialect.text_match(self._dialect.concat(expressions), self._locale)
        self._fragments.append(PredicateFragment(template, (query,)))
        self._query = query
        return query

    def build(self) -> Predicate:
        return Predicate(tuple(self._fragments))


def where_clause(predicate: Predicate) -> list[str | PredicateFragment]:
    if not predicate.fragments:
        return []
    return ["WHERE", predicate.as_fragment()]
