import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from chatrelay.core.config import Settings
from chatrelay.models.base import Base
from chatrelay.models.message import Message  # noqa: F401  registers the table
from chatrelay.models.user import User  # noqa: F401  registers the table
from chatrelay.store.base import MessageStore
from chatrelay.store.ephemeral import EphemeralMessageStore
from chatrelay.store.sql import SqlMessageStore

logger = logging.getLogger(__name__)


def create_engine(url: str) -> AsyncEngine:
    return create_async_engine(
        url,
        echo=False,
        pool_pre_ping=True,
    )


async def initialize_db(engine: AsyncEngine):
    """
    Initialize the database by creating all tables defined in SQLAlchemy models.
    This method is idempotent and safe to run at startup.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def select_store(settings: Settings) -> MessageStore:
    """
    Pick the store for the lifetime of the process.

    The durable store is used only if one is configured and answers within
    ``db_connect_timeout``; otherwise the relay runs in ephemeral mode.
    """
    url = settings.sqlalchemy_url
    if not url:
        logger.warning("No database configured, running in ephemeral mode")
        return EphemeralMessageStore()

    engine = None
    try:
        engine = create_engine(url)
        await asyncio.wait_for(initialize_db(engine), timeout=settings.db_connect_timeout)
    except Exception as e:
        logger.warning(f"Database not available ({e!r}), running in ephemeral mode")
        if engine is not None:
            await engine.dispose()
        return EphemeralMessageStore()

    logger.info(f"Connected to database at {engine.url.render_as_string(hide_password=True)}")
    return SqlMessageStore(engine)
