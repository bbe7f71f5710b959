# shared/db.py
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from shared.config import DATABASE_URL
from shared.exceptions import StorageError

logger = logging.getLogger(__name__)

engine = create_async_engine(DATABASE_URL, future=True)

# Objects stay usable after commit; relationships must be loaded explicitly (selectinload).
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


def utcnow():
    return datetime.now(timezone.utc)


async def get_db():
    async with SessionLocal() as session:
        yield session


async def commit_or_raise(db: AsyncSession, what: str):
    """Commit, or roll back and raise StorageError naming the failed step."""
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Storage failure while %s", what)
        raise StorageError(f"Storage failure while {what}: {e.__class__.__name__}") from e
