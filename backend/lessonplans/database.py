"""
Database connection and session management.

Key concepts:
- We use SQLAlchemy 2.0's async API (aiosqlite locally, asyncpg in production)
- AsyncSession gives us non-blocking database calls
- get_db() is a "dependency" that FastAPI injects into route handlers:
  it provides a session and ensures cleanup after each request
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import NullPool

from lessonplans.config import settings

# SQLite connections are bound to the event loop that opened them, so we
# don't pool them. Server databases get a small connection pool.
if settings.is_sqlite:
    engine_options = {"poolclass": NullPool}
else:
    engine_options = {"pool_size": 5, "max_overflow": 10}

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **engine_options,
)

# Session factory - creates new database sessions
# - expire_on_commit=False means objects stay usable after commit
#   (without this, accessing an attribute after commit triggers a lazy load,
#    which fails with async)
AsyncSessionLocal = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def get_db():
    """FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...

    The session is closed when the request finishes, even on error.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db():
    """Create all tables defined by our models.

    Called once at startup. Alembic migrations would replace this
    once the schema stabilizes.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
