import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from src.configuration.config import Settings

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the engine of the profile store.

    Connections are opened lazily, so the service starts even when the
    store is unreachable; lookups then fail and fall back to defaults.
    """
    kwargs = {
        "echo": settings.log_level.upper() == "DEBUG",
        "pool_pre_ping": True,
    }
    # sqlite (tests, local runs) does not take pool sizing arguments
    if not settings.supabase_db_url.startswith("sqlite"):
        kwargs["pool_size"] = settings.supabase_pool_size
    return create_async_engine(settings.supabase_db_url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
