from collections.abc import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from fortivus.core.config import settings


class Base(DeclarativeBase):
    pass


def configure_sqlite(engine: AsyncEngine) -> None:
    """
    Turn on foreign keys and let SQLAlchemy own BEGIN, so SAVEPOINTs nest
    inside the outer transaction instead of committing it.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def make_engine(url: str) -> AsyncEngine:
    eng = create_async_engine(url)
    if eng.dialect.name == "sqlite":
        configure_sqlite(eng)
    return eng


engine = make_engine(settings.DATABASE_URL)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with SessionLocal() as db:
        yield db


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Sessions for work that outlives the request session (background tasks, bulk actions)."""
    return SessionLocal
