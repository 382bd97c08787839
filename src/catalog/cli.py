import sys
import typer
from catalog.config import settings
from catalog.logging import configure_logging, logger

app = typer.Typer(no_args_is_help=True)

@app.callback()
def main():
    """
    Catalog search CLI.
    """
    configure_logging(settings.LOG_LEVEL)

@app.command(name="doctor")
def doctor():
    """
    Check configuration and database connectivity.
    """
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError
    from catalog.db import check_isolation_level
    from catalog.infra.db.engine import engine
    from catalog.search.dialect import dialect_for

    logger.info("Running doctor check...")
    failures: list[str] = []

    print("\n🩺 Catalog Search Doctor\n")
    print("[Environment]")
    print(f"  Python: {sys.version.split()[0]}")

    print("\n[Search configuration]")
    print(f"  SEARCH_DEFAULT_LIMIT:        {settings.SEARCH_DEFAULT_LIMIT}")
    print(f"  SEARCH_MAX_LIMIT:            {settings.SEARCH_MAX_LIMIT}")
    print(f"  SEARCH_NO_PHRASE_RELEVANCE:  {settings.SEARCH_NO_PHRASE_RELEVANCE}")
    print(f"  SEARCH_TITLE_WEIGHT:         {settings.SEARCH_TITLE_WEIGHT}")
    print(f"  SEARCH_DESCRIPTION_WEIGHT:   {settings.SEARCH_DESCRIPTION_WEIGHT}")
    print(f"  SEARCH_ISOLATION_LEVEL:      {settings.SEARCH_ISOLATION_LEVEL or 'driver default'}")
    if settings.SEARCH_DESCRIPTION_WEIGHT and settings.SEARCH_TITLE_WEIGHT <= settings.SEARCH_DESCRIPTION_WEIGHT:
        print("  ⚠️  Title matches will not outrank description-only matches")

    print("\n[Database]")
    try:
        dialect_for(engine.dialect.name)
        print(f"  Dialect:                     ✅ {engine.dialect.name}")
    except ValueError as e:
        print(f"  Dialect:                     ❌ {engine.dialect.name}")
        failures.append(str(e))
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("  Connection:                  ✅ OK")
    except SQLAlchemyError as e:
        print("  Connection:                  ❌ Failed")
        failures.append(f"Cannot connect to DATABASE_URL: {type(e).__name__}")
    try:
        check_isolation_level(engine, settings.SEARCH_ISOLATION_LEVEL)
        print("  Isolation level:             ✅ OK")
    except ValueError as e:
        print("  Isolation level:             ❌ Unsupported")
        failures.append(str(e))
    except SQLAlchemyError:
        print("  Isolation level:             ⚠️  Not checked")

    print(f"\n{'─' * 50}")
    if failures:
        for msg in failures:
            print(f"  ❌ {msg}")
        print()
        raise typer.Exit(code=1)
    print("All checks passed ✅\n")


db_app = typer.Typer(help="Database management commands.")
app.add_typer(db_app, name="db")

@db_app.command("init")
def init():
    """Create the catalog tables."""
    from catalog.db import init_db
    from catalog.infra.db.engine import engine
    try:
        init_db(engine)
        logger.info("Database initialized successfully.")
        print("✅ Database initialized.")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        print(f"❌ Failed: {e}")
        raise typer.Exit(code=1)

@db_app.command("seed")
def seed():
    """Load the demo catalog into an empty database."""
    from catalog.infra.db.seed import seed_demo_catalog
    from catalog.infra.db.uow import UnitOfWork
    from catalog.search.executor import utcnow
    with UnitOfWork() as uow:
        added = seed_demo_catalog(uow.session, utcnow().replace(tzinfo=None))
    print(f"✅ Seeded {added} rows." if added else "Catalog already has content; nothing seeded.")


def _parse_filters(raw: list[str]) -> dict[str, str]:
    filters: dict[str, str] = {}
    for item in raw:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            print(f"❌ Filters must look like name=value, got {item!r}")
            raise typer.Exit(code=2)
        filters[name.strip()] = value
    return filters

@app.command("search")
def search(
    phrase: str = typer.Argument("", help="Search phrase; empty lists everything"),
    type_: str | None = typer.Option(None, "--type", help="course, product or event"),
    locale: str = typer.Option("en", help="Content locale"),
    limit: int = typer.Option(20),
    offset: int = typer.Option(0),
    filter_: list[str] = typer.Option([], "--filter", help="name=value, repeatable"),
    include_past: bool = typer.Option(False, "--include-past"),
):
    """Search the catalog."""
    from catalog.api.schemas.search import EntityType, SearchQuery
    from catalog.domain.exceptions import CatalogError
    from catalog.infra.db.uow import UnitOfWork
    from catalog.services.search_service import SearchService

    try:
        payload = SearchQuery(
            phrase=phrase or None,
            type=EntityType(type_) if type_ else None,
            filters=_parse_filters(filter_),
            locale=locale,
            limit=limit,
            offset=offset,
            include_past=include_past,
        )
    except ValueError as e:
        print(f"❌ {e}")
        raise typer.Exit(code=2)

    try:
        with UnitOfWork(isolation_level=settings.SEARCH_ISOLATION_LEVEL) as uow:
            result = SearchService(uow).search(payload)
    except CatalogError as e:
        print(f"❌ {e.message}")
        raise typer.Exit(code=1)

    if not result.items:
        print("No results found.")
        return
    print(f"Showing {len(result.items)} of {result.total} results:")
    for i, item in enumerate(result.items, start=offset + 1):
        print(f"{i}. [{item.type} {item.id}] {item.title} ({item.relevance:.3f})")
    if result.has_more:
        print(f"… more with --offset {offset + len(result.items)}")

@app.command("suggest")
def suggest(text: str, locale: str = typer.Option("en"), limit: int = typer.Option(5)):
    """Suggest titles containing TEXT."""
    from catalog.domain.exceptions import CatalogError
    from catalog.infra.db.uow import UnitOfWork
    from catalog.services.search_service import SearchService
    try:
        with UnitOfWork() as uow:
            suggestions = SearchService(uow).suggest(text, locale=locale, limit=limit)
    except CatalogError as e:
        print(f"❌ {e.message}")
        raise typer.Exit(code=1)
    for title in suggestions.items:
        print(title)

if __name__ == "__main__":
    app()
