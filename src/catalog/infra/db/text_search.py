"""SQLite implementation of the text-search primitives.

PostgreSQL ships ``to_tsvector``/``ts_rank``; SQLite gets two deterministic
Python functions registered on every new connection:

* ``text_match(document, query)`` -> 1 when every query term occurs in the
  document, else 0.
* ``match_score(document, query)`` -> fraction of query terms found in the
  document, in ``[0, 1]``.
"""
from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.engine import Engine

from catalog.search.dialect import query_terms


def _tokens(document) -> set[str]:
    if document is None:
        return set()
    return set(query_terms(str(document)))


def match_score(document, query) -> float:
    terms = query_terms(query)
    if not terms:
        return 0.0
    tokens = _tokens(document)
    return sum(1 for t in terms if t in tokens) / len(terms)


def text_match(document, query) -> int:
    terms = query_terms(query)
    if not terms:
        return 0
    tokens = _tokens(document)
    return int(all(t in tokens for t in terms))


def _register_functions(dbapi_conn, _):
    dbapi_conn.create_function("match_score", 2, match_score, deterministic=True)
    dbapi_conn.create_function("text_match", 2, text_match, deterministic=True)


def install_text_search(engine: Engine) -> None:
    """Register the functions for connections opened from now on (idempotent)."""
    if engine.dialect.name != "sqlite":
        return
    if not event.contains(engine, "connect", _register_functions):
        event.listen(engine, "connect", _register_functions)
