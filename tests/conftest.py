"""Shared test fixtures.

  use_test_engine  - redirects UoW + infra layer to a temp-file SQLite DB
                     with the text-search functions installed.
  session          - plain Session on the test engine.
  make / seed      - build catalog rows and persist them.
  executor         - PagedQueryExecutor over the test DB with a fixed clock.
  client           - FastAPI TestClient wired to the test engine.
"""
import itertools
import os
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
from sqlmodel import SQLModel, Session, create_engine

NOW = datetime(2026, 6, 1, 12, 0, 0)


def pytest_configure(config):
    """Keep catalog.db from opening the default on-disk database during collection."""
    os.environ.setdefault("DATABASE_URL", "sqlite://")


@pytest.fixture
def use_test_engine(tmp_path, monkeypatch):
    """Monkeypatch infra/db engine references to an isolated temp-file SQLite DB."""
    from catalog.infra.db.text_search import install_text_search

    db_path = tmp_path / "test_catalog.db"
    test_engine = create_engine(f"sqlite:///{db_path}", echo=False)
    # Must precede the first connection; pooled connections keep their functions.
    install_text_search(test_engine)

    import catalog.models  # noqa: F401 - register all ORM mappers
    SQLModel.metadata.create_all(test_engine)

    monkeypatch.setattr("catalog.infra.db.engine.engine", test_engine)
    monkeypatch.setattr("catalog.infra.db.uow.engine", test_engine)

    yield test_engine

    SQLModel.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def session(use_test_engine):
    with Session(use_test_engine) as s:
        yield s


_slugs = itertools.count(1)


def _course(**kw):
    from catalog.models import Course
    data = dict(
        title="Untitled course", slug=f"course-{next(_slugs)}", description="A course.",
        price=50.0, level="beginner", duration_hours=4, is_published=True,
    )
    data.update(kw)
    return Course(**data)


def _product(**kw):
    from catalog.models import DigitalProduct
    data = dict(
        title="Untitled product", slug=f"product-{next(_slugs)}", description="A product.",
        price=20.0, product_type="pdf", file_size_mb=1.5, is_published=True,
    )
    data.update(kw)
    return DigitalProduct(**data)


def _event(**kw):
    from catalog.models import Event
    data = dict(
        title="Untitled event", slug=f"event-{next(_slugs)}", description="An event.",
        price=30.0, event_date=NOW + timedelta(days=7), duration_hours=2,
        venue_name="Main Hall", venue_city="Lisbon", venue_country="Portugal",
        capacity=50, available_spots=10, is_published=True,
    )
    data.update(kw)
    return Event(**data)


@pytest.fixture
def make():
    return SimpleNamespace(course=_course, product=_product, event=_event)


@pytest.fixture
def seed(use_test_engine):
    """Persist rows and return their generated ids, in order."""
    def _seed(*rows):
        with Session(use_test_engine) as s:
            s.add_all(rows)
            s.commit()
            return [r.id for r in rows]
    return _seed


@pytest.fixture
def entities():
    from catalog.search import build_entities
    return build_entities()


@pytest.fixture
def executor(session):
    from catalog.infra.db.repositories.search_repository import SearchRepository
    from catalog.search import PagedQueryExecutor
    return PagedQueryExecutor(SearchRepository(session), clock=lambda: NOW)


@pytest.fixture
def client(use_test_engine):
    """FastAPI TestClient backed by the isolated test engine."""
    from fastapi.testclient import TestClient
    from catalog.api.app import create_app

    app = create_app()
    with TestClient(app) as c:
        yield c
