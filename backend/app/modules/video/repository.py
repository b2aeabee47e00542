"""Video repository for database operations."""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.video.models import Video


class VideoRepository:
    """Repository for Video CRUD operations.

    Writes are flushed but not committed; the service owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        user_id: uuid.UUID,
        title: str,
        description: Optional[str] = None,
    ) -> Video:
        video = Video(
            user_id=user_id,
            title=title,
            description=description,
        )

        self.session.add(video)
        await self.session.flush()
        await self.session.refresh(video)
        return video

    async def get_by_id(self, video_id: uuid.UUID) -> Optional[Video]:
        result = await self.session.execute(
            select(Video).where(Video.id == video_id)
        )
        return result.scalar_one_or_none()

    async def list_by_user(
        self,
        user_id: uuid.UUID,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Video]:
        result = await self.session.execute(
            select(Video)
            .where(Video.user_id == user_id)
            .order_by(Video.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def update(self, video: Video) -> Video:
        """Flush pending changes on ``video`` and reload server-side columns."""
        self.session.add(video)
        await self.session.flush()
        await self.session.refresh(video)
        return video

    async def delete(self, video: Video) -> None:
        await self.session.delete(video)
        await self.session.flush()
