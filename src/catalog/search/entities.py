"""Searchable catalog entity definitions.

Descriptors are built once at startup; ranking weights come from settings.
"""
from __future__ import annotations

from dataclasses import dataclass

from catalog.search.fields import FieldKind, FieldSpec, validate_identifier
from catalog.search.predicates import FilterKind, FilterOp, FilterSpec

COURSE_LEVELS = ("beginner", "intermediate", "advanced")
PRODUCT_TYPES = ("pdf", "audio", "video", "ebook")


@dataclass(frozen=True, slots=True)
class EntityDescriptor:
    name: str
    table: str
    fields: tuple[FieldSpec, ...]
    filters: tuple[FilterSpec, ...] = ()
    sort_keys: tuple[str, ...] = ("title",)
    id_column: str = "id"
    published_column: str = "is_published"
    deleted_column: str | None = None
    elapsed_column: str | None = None

    def __post_init__(self) -> None:
        for ident in (self.table, self.id_column, self.published_column):
            validate_identifier(ident)
        for ident in (self.deleted_column, self.elapsed_column):
            if ident is not None:
                validate_identifier(ident)
        names = {f.name for f in self.fields}
        if not any(f.ranked for f in self.fields):
            raise ValueError(f"Entity {self.name!r} has no weighted text field")
        missing = [k for k in self.sort_keys if k not in names]
        if missing:
            raise ValueError(f"Entity {self.name!r}: unknown sort keys {missing}")
        filter_names = {s.name for s in self.filters}
        for spec in self.filters:
            if spec.pairs_with and spec.pairs_with not in filter_names:
                raise ValueError(f"Filter {spec.name!r} pairs with unknown {spec.pairs_with!r}")

    def field(self, name: str) -> FieldSpec:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    @property
    def ranked_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.ranked)

    @property
    def filter_names(self) -> frozenset[str]:
        return frozenset(s.name for s in self.filters)


def _price_filters() -> tuple[FilterSpec, ...]:
    return (
        FilterSpec("minPrice", "price", FilterOp.GTE, FilterKind.NUMERIC, minimum=0, pairs_with="maxPrice"),
        FilterSpec("maxPrice", "price", FilterOp.LTE, FilterKind.NUMERIC, minimum=0, pairs_with="minPrice"),
    )


def build_entities(
    *,
    title_weight: float = 2.0,
    description_weight: float = 1.0,
    location_weight: float = 1.0,
) -> dict[str, EntityDescriptor]:
    """Return the course/product/event descriptors keyed by entity name."""
    title = FieldSpec("title", localizable=True, weight=title_weight)
    description = FieldSpec("description", localizable=True, weight=description_weight)
    common = (
        FieldSpec("id", FieldKind.NUMERIC),
        title,
        FieldSpec("slug"),
        description,
        FieldSpec("price", FieldKind.NUMERIC),
        FieldSpec("image_url"),
    )

    course = EntityDescriptor(
        name="course",
        table="courses",
        fields=common + (
            FieldSpec("level", FieldKind.ENUM),
            FieldSpec("duration_hours", FieldKind.NUMERIC),
        ),
        filters=_price_filters() + (
            FilterSpec("level", "level", FilterOp.EQ, FilterKind.ENUM, choices=COURSE_LEVELS),
        ),
        deleted_column="deleted_at",
    )

    product = EntityDescriptor(
        name="product",
        table="digital_products",
        fields=common + (
            FieldSpec("product_type", FieldKind.ENUM),
            FieldSpec("file_size_mb", FieldKind.NUMERIC),
        ),
        filters=_price_filters() + (
            FilterSpec("productType", "product_type", FilterOp.EQ, FilterKind.ENUM, choices=PRODUCT_TYPES),
        ),
    )

    event = EntityDescriptor(
        name="event",
        table="events",
        fields=common + (
            FieldSpec("event_date", FieldKind.DATE),
            FieldSpec("duration_hours", FieldKind.NUMERIC),
            FieldSpec("venue_name", localizable=True),
            FieldSpec("venue_city", weight=location_weight),
            FieldSpec("venue_country", weight=location_weight),
            FieldSpec("available_spots", FieldKind.NUMERIC),
        ),
        filters=_price_filters() + (
            FilterSpec("city", "venue_city", FilterOp.CONTAINS, FilterKind.TEXT),
            FilterSpec("country", "venue_country", FilterOp.EQ, FilterKind.TEXT),
            FilterSpec("startDate", "event_date", FilterOp.GTE, FilterKind.DATE, pairs_with="endDate"),
            FilterSpec("endDate", "event_date", FilterOp.LTE, FilterKind.DATE, pairs_with="startDate"),
            FilterSpec("minAvailableSpots", "available_spots", FilterOp.GTE, FilterKind.NUMERIC, minimum=0),
        ),
        sort_keys=("event_date", "title"),
        elapsed_column="event_date",
    )

    return {e.name: e for e in (course, product, event)}
