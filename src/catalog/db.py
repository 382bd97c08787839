"""Process-wide database engine."""
from __future__ import annotations

from pathlib import Path

from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError
from sqlmodel import SQLModel, create_engine

from catalog.config import settings


def make_engine(url: str, *, echo: bool = False) -> Engine:
    parsed = make_url(url)
    connect_args: dict = {}
    if parsed.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
        if parsed.database and parsed.database != ":memory:":
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, echo=echo, connect_args=connect_args)


engine = make_engine(settings.DATABASE_URL)


def init_db(bind: Engine | None = None) -> None:
    """Create all catalog tables that do not exist yet."""
    import catalog.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def check_isolation_level(bind: Engine, level: str | None) -> None:
    """Raise ValueError when *bind* cannot open connections at *level*."""
    if not level:
        return
    try:
        with bind.connect() as conn:
            conn.execution_options(isolation_level=level)
    except ArgumentError as exc:
        raise ValueError(
            f"SEARCH_ISOLATION_LEVEL={level!r} is not supported by {bind.dialect.name}"
        ) from exc
