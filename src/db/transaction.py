from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit everything written inside the block at once, roll back on any error"""
    try:
        yield db
        await db.commit()
    except Exception:
        await db.rollback()
        raise
