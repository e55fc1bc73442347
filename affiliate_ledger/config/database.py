"""
Database engine and session factory.

Engines are built from an explicitly passed Settings instance.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from affiliate_ledger.config.settings import Settings
from affiliate_ledger.models.base import Base


def create_engine(settings: Settings, null_pool: bool = False) -> AsyncEngine:
    """
    Create async engine for the configured database.

    Args:
        settings: Application settings
        null_pool: Disable pooling (dramatiq workers, one-off scripts)

    Returns:
        Async engine
    """
    if settings.database_url.startswith("sqlite"):
        # In-memory databases live in a single shared connection
        poolclass = StaticPool if ":memory:" in settings.database_url else None
        return create_async_engine(
            settings.database_url,
            echo=settings.database_echo,
            connect_args={"check_same_thread": False},
            poolclass=poolclass,
        )

    database_url = settings.database_url
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace(
            "postgresql://", "postgresql+asyncpg://", 1
        )

    if null_pool:
        return create_async_engine(
            database_url,
            echo=settings.database_echo,
            poolclass=NullPool,
        )

    return create_async_engine(
        database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
    )


def create_session_maker(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create session maker bound to engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create all ledger tables (tests and local development)."""
    # Register all models with Base.metadata
    from affiliate_ledger import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
