"""Re-export the singleton engine from catalog.db and register SQLite connect hooks."""
from sqlalchemy import event

from catalog.db import engine  # singleton; created once at catalog.db import
from catalog.infra.db.text_search import install_text_search
import catalog.models  # noqa: F401   # registers the catalog table mappers


def _set_wal_mode(dbapi_conn, _):
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA journal_mode=WAL")
    cur.execute("PRAGMA synchronous=NORMAL")
    cur.close()


if engine.dialect.name == "sqlite":
    event.listen(engine, "connect", _set_wal_mode)
    install_text_search(engine)

__all__ = ["engine"]
