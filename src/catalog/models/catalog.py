"""Catalog tables: courses, digital products and events.

Translatable text lives next to the base (English) column with a locale
suffix, e.g. ``title`` / ``title_es``; NULL or empty means "not translated".
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _timestamp(*, index: bool = False, nullable: bool = False, **kw):
    """Naive UTC column, stored without timezone on every backend."""
    return Field(sa_column=Column(DateTime(timezone=False), index=index, nullable=nullable), **kw)


class CourseLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ProductType(str, Enum):
    PDF = "pdf"
    AUDIO = "audio"
    VIDEO = "video"
    EBOOK = "ebook"


class Course(SQLModel, table=True):
    __tablename__ = "courses"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    slug: str = Field(index=True, unique=True)
    description: str
    price: float
    image_url: Optional[str] = None
    level: Optional[str] = None
    duration_hours: Optional[int] = None
    is_published: bool = Field(default=False, index=True)

    title_es: Optional[str] = None
    description_es: Optional[str] = None

    created_at: datetime = _timestamp(default_factory=_utcnow)
    updated_at: datetime = _timestamp(default_factory=_utcnow)
    deleted_at: Optional[datetime] = _timestamp(index=True, nullable=True, default=None)


class DigitalProduct(SQLModel, table=True):
    __tablename__ = "digital_products"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    slug: str = Field(index=True, unique=True)
    description: str
    price: float
    product_type: str = Field(index=True)
    file_size_mb: Optional[float] = None
    image_url: Optional[str] = None
    is_published: bool = Field(default=False, index=True)

    title_es: Optional[str] = None
    description_es: Optional[str] = None

    created_at: datetime = _timestamp(default_factory=_utcnow)
    updated_at: datetime = _timestamp(default_factory=_utcnow)


class Event(SQLModel, table=True):
    __tablename__ = "events"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    slug: str = Field(index=True, unique=True)
    description: str
    price: float
    event_date: datetime = _timestamp(index=True)
    duration_hours: int
    venue_name: str
    venue_city: str
    venue_country: str
    capacity: int
    available_spots: int
    image_url: Optional[str] = None
    is_published: bool = Field(default=False, index=True)

    title_es: Optional[str] = None
    description_es: Optional[str] = None
    venue_name_es: Optional[str] = None

    created_at: datetime = _timestamp(default_factory=_utcnow)
    updated_at: datetime = _timestamp(default_factory=_utcnow)
