from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from app.api.core.config import PROJECT_ROOT, settings


def get_db_url() -> str:
    """
    Database URL for the async engine: an aiosqlite file in the project root named after
    DB_NAME, or asyncpg for any other DB_TYPE.
    """
    if settings.DB_TYPE == "sqlite":
        return f"sqlite+aiosqlite:///{PROJECT_ROOT / settings.DB_NAME}.sqlite3"

    return (
        f"postgresql+asyncpg://{settings.DB_USER}:{settings.DB_PASS}"
        f"@{settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME}"
    )


engine = create_async_engine(get_db_url(), echo=settings.DB_ECHO, future=True)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = SQLModel


async def get_db():
    """Request-scoped session. Commits what is still pending once the route
    returns, rolls back if it raised."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
