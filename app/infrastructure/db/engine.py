from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.config import Settings

# Local/dev fallback when no DATABASE_URL is configured
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./catalog.db"


def build_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(
        settings.database_url or DEFAULT_DATABASE_URL,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
