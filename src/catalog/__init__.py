"""Catalog search: locale-aware, relevance-ranked search over courses, products and events."""

__version__ = "0.1.0"
