"""ORM table models. Importing this package registers every mapper."""

from catalog.models.catalog import Course, CourseLevel, DigitalProduct, Event, ProductType

__all__ = ["Course", "CourseLevel", "DigitalProduct", "Event", "ProductType"]
