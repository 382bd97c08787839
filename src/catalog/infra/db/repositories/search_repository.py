"""Storage side of catalog search. No business logic; caller owns the transaction."""
from __future__ import annotations

from typing import Any, Callable, TypeVar

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Result
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from catalog.domain.exceptions import StorageUnavailable
from catalog.logging import logger
from catalog.search.dialect import TextSearchDialect, dialect_for
from catalog.search.predicates import BoundQuery

T = TypeVar("T")


def run_bound(session: Session, query: BoundQuery, consume: Callable[[Result], T]) -> T:
    """Execute *query* with its positional values bound; map driver errors."""
    stmt = text(query.sql).bindparams(
        *(bindparam(name, value) for name, value in query.params.items())
    )
    try:
        return consume(session.connection().execute(stmt))
    except SQLAlchemyError as exc:
        logger.error("Catalog query failed (%s): %s", type(exc).__name__, exc)
        raise StorageUnavailable(f"Catalog storage unavailable: {type(exc).__name__}") from exc


class SearchRepository:
    def __init__(self, session: Session) -> None:
        self._s = session
        self.dialect: TextSearchDialect = dialect_for(session.get_bind().dialect.name)

    def count(self, query: BoundQuery) -> int:
        return int(run_bound(self._s, query, lambda r: r.scalar_one()))

    def fetch(self, query: BoundQuery) -> list[dict[str, Any]]:
        return run_bound(self._s, query, lambda r: [dict(row) for row in r.mappings().all()])
