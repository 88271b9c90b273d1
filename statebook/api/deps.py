from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from statebook.db.session import database
from statebook.integrations.storage import UploadStore


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_upload_store() -> UploadStore:
    return UploadStore()
