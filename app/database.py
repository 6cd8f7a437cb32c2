from datetime import datetime, timezone

from sqlalchemy import MetaData, event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.cache import cache
from app.config import settings
from app.middleware import install_query_counter

# Deterministic constraint names so Alembic autogenerate diffs stay stable.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp with microsecond precision.

    Assigned application-side rather than via ``server_default`` so that
    rows created within the same second still order newest-first.
    """
    return datetime.now(timezone.utc)


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """
    Turn on ``PRAGMA foreign_keys`` for every new SQLite connection.

    SQLite ignores ``ON DELETE CASCADE`` unless the pragma is set per
    connection; Postgres needs nothing, so this is a no-op elsewhere.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Module-level engine variable allows tests to override with a test engine.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

install_query_counter(engine)
enable_sqlite_foreign_keys(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


async def get_db():
    """
    Yield a session; commit when the request succeeds, roll back otherwise.

    Cached public listings are dropped only after the commit lands, so a
    concurrent reader cannot refill the cache from pre-commit rows.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
            await cache.invalidate_public_if_stale(session)
        except Exception:
            await session.rollback()
            raise
