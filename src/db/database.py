import inspect
from functools import wraps
from typing import AsyncGenerator

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine, AsyncSession
from sqlalchemy.pool import NullPool

from src.core import get_settings
from src.logs import debug_logger

# Get application settings
settings = get_settings()

# SQLSTATE codes for serialization failure and deadlock
RETRYABLE_SQLSTATES = {"40001", "40P01"}

# Create async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    future=True,
    poolclass=NullPool,
)

# Create session factory
async_session_factory = async_sessionmaker(
    engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


# Dependency for FastAPI
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def is_retryable(error: DBAPIError) -> bool:
    """True when the driver reports a contention error worth retrying"""
    orig = getattr(error, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate in RETRYABLE_SQLSTATES


def retry_on_conflict(func):
    """Re-run a transactional service call when the database reports contention.

    The wrapped coroutine must receive the session as ``db``. The session is
    rolled back before every retry; after ``TRANSACTION_RETRIES`` attempts
    the last error propagates.
    """
    signature = inspect.signature(func)

    @wraps(func)
    async def wrapper(*args, **kwargs):
        db = signature.bind_partial(*args, **kwargs).arguments["db"]
        attempts = max(1, settings.TRANSACTION_RETRIES)
        for attempt in range(1, attempts + 1):
            try:
                return await func(*args, **kwargs)
            except DBAPIError as e:
                if not is_retryable(e) or attempt == attempts:
                    raise
                await db.rollback()
                debug_logger.warning(
                    f"Contention in {func.__name__}, retrying ({attempt}/{attempts})"
                )

    return wrapper


# Initialize database
async def init_db():
    async with engine.begin() as conn:
        # Import here to avoid circular imports
        from src.db.models import Base
        await conn.run_sync(Base.metadata.create_all)
