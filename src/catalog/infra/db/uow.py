"""Unit of Work: one session per logical operation."""
from __future__ import annotations
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from catalog.domain.exceptions import StorageUnavailable
from catalog.infra.db.engine import engine
from catalog.logging import logger


class UnitOfWork:
    """Context manager wrapping a single DB session.

    Commits on clean exit, rolls back on exception, always closes. With an
    ``isolation_level`` the session's connection is opened at that level, so
    every statement of the operation reads from one transaction.
    """

    def __init__(self, isolation_level: str | None = None) -> None:
        self._session: Session | None = None
        self._isolation_level = isolation_level

    def __enter__(self) -> "UnitOfWork":
        self._session = Session(engine)
        if self._isolation_level:
            try:
                self._session.connection(
                    execution_options={"isolation_level": self._isolation_level}
                )
            except SQLAlchemyError as exc:
                self._session.close()
                self._session = None
                logger.error("Cannot open session at %s: %s", self._isolation_level, exc)
                raise StorageUnavailable(
                    f"Catalog storage unavailable: isolation level {self._isolation_level!r} rejected"
                ) from exc
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self._session.commit()
            else:
                self._session.rollback()
        finally:
            self._session.close()
            self._session = None

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError("UnitOfWork is not active — use as a context manager.")
        return self._session

    def commit(self) -> None:
        """Explicit mid-operation commit (e.g. to get a generated PK)."""
        if self._session is None:
            raise RuntimeError("UnitOfWork is not active — use as a context manager.")
        self._session.commit()
