"""
Engine setup and the per-batch import session.

One session backs one batch: the stores flush, import_session commits
when the batch returns and rolls back on a database error. Per-set and
per-card writes run inside savepoints of that one transaction.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from vaultimport.config import Settings, settings
from vaultimport.db.catalog_store import CatalogStore
from vaultimport.db.ownership_store import OwnershipStore
from vaultimport.models.db import Base
from vaultimport.services.batch_import import BatchImporter
from vaultimport.services.scryfall_client import ScryfallClient

logger = logging.getLogger(__name__)


def configure_sqlite(engine: AsyncEngine) -> AsyncEngine:
    """
    Enforce foreign keys and emit BEGIN explicitly on SQLite connections.

    The sqlite driver defers BEGIN to the first write, which leaves a
    SAVEPOINT outside the batch transaction. Other dialects are untouched.
    """
    if engine.dialect.name != "sqlite":
        return engine

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, _connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    return engine


engine = configure_sqlite(
    create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
    )
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Create the catalog and ownership tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def import_session(
    remote: ScryfallClient | None = None,
    config: Settings | None = None,
) -> AsyncIterator[BatchImporter]:
    """
    Yield a BatchImporter whose stores share one session.

    Usage:
        async with import_session(remote=ScryfallClient()) as importer:
            result = await importer.import_files(files, mode=ImportMode.REPLACE)

    Raises:
        SQLAlchemyError: If the final commit fails; the batch is rolled back
    """
    async with async_session_factory() as session:
        importer = BatchImporter(
            CatalogStore(session),
            OwnershipStore(session),
            remote=remote,
            settings=config,
        )
        try:
            yield importer
            await session.commit()
        except SQLAlchemyError:
            logger.exception("Import batch rolled back")
            await session.rollback()
            raise
