"""Search DTOs: pure Pydantic, zero ORM imports. JSON uses camelCase."""
from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class EntityType(str, Enum):
    COURSE = "course"
    PRODUCT = "product"
    EVENT = "event"


class SearchQuery(CamelModel):
    phrase: str | None = None
    type: EntityType | None = None
    filters: dict[str, Any] = Field(default_factory=dict)
    # Validated by the search engine so clients get its error messages.
    locale: str = "en"
    limit: int | None = None
    offset: int = 0
    include_past: bool = False


class SearchHit(CamelModel):
    id: int
    title: str
    slug: str
    description: str
    price: float
    image_url: str | None = None
    relevance: float


class CourseHit(SearchHit):
    type: Literal["course"] = "course"
    level: str | None = None
    duration_hours: int | None = None


class ProductHit(SearchHit):
    type: Literal["product"] = "product"
    product_type: str
    file_size_mb: float | None = None


class EventHit(SearchHit):
    type: Literal["event"] = "event"
    event_date: datetime
    duration_hours: int
    venue_name: str
    venue_city: str
    venue_country: str
    available_spots: int


SearchItem = Annotated[Union[CourseHit, ProductHit, EventHit], Field(discriminator="type")]


class SearchResponse(CamelModel):
    items: list[SearchItem]
    total: int
    limit: int
    offset: int
    has_more: bool


class SuggestionList(CamelModel):
    items: list[str]


class PriceRange(CamelModel):
    min: float
    max: float


class FacetsRead(CamelModel):
    levels: list[str]
    product_types: list[str]
    price_range: PriceRange
