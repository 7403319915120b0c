from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from . import config

engine = create_async_engine(config.DATABASE_URL, echo=config.SQL_ECHO)

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session


async def create_tables(bind=engine) -> None:
    # Models must be imported before this runs so they register with Base
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = ["AsyncSession", "AsyncSessionLocal", "Base", "create_tables", "engine", "get_db", "utcnow"]
