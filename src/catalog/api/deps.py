"""FastAPI dependencies."""
from __future__ import annotations
from typing import Generator
from catalog.config import settings
from catalog.infra.db.uow import UnitOfWork


def get_uow() -> Generator[UnitOfWork, None, None]:
    """Yield one UnitOfWork per request; commit/rollback in __exit__."""
    with UnitOfWork() as uow:
        yield uow


def get_search_uow() -> Generator[UnitOfWork, None, None]:
    """Like get_uow, but at the configured search isolation level."""
    with UnitOfWork(isolation_level=settings.SEARCH_ISOLATION_LEVEL) as uow:
        yield uow
