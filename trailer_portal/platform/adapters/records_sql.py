import logging
from typing import Sequence
from sqlalchemy import select, delete
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from trailer_portal.core.errors import StoreError
from trailer_portal.modules.videos.models import Video
from trailer_portal.modules.videos.schemas import DEFAULT_ORDERINGS, NewVideo, Ordering, VideoRecord
from trailer_portal.platform.ports.record_store import RecordStorePort

log = logging.getLogger("records.sql")

def _to_record(obj: Video) -> VideoRecord:
    return VideoRecord(
        id=obj.id,
        slug=obj.slug,
        title=obj.title,
        description=obj.description or "",
        file_path=obj.file_path,
        url=obj.url,
        full_url=obj.full_url or "",
        created_at=obj.created_at,
    )

class SqlRecordStore(RecordStorePort):
    """Direct Postgres access to the `videos` table (e.g. Supabase's connection string)."""

    def __init__(self, engine: AsyncEngine, sessions: async_sessionmaker[AsyncSession]):
        self.engine = engine
        self.sessions = sessions

    async def _select_ordered(self, ordering: Ordering) -> list[VideoRecord] | None:
        column = Video.__table__.c.get(ordering.column)
        if column is None:
            log.warning(f"Listing ordered by {ordering.column} rejected: unknown column")
            return None
        q = select(Video).order_by(column.desc() if ordering.descending else column.asc())
        async with self.sessions() as session:
            try:
                res = await session.execute(q)
            except DBAPIError as e:
                log.warning(f"Listing ordered by {ordering.column} rejected: {e.orig}")
                return None
            return [_to_record(obj) for obj in res.scalars().all()]

    async def list_all(self, orderings: Sequence[Ordering] = DEFAULT_ORDERINGS) -> list[VideoRecord]:
        for ordering in orderings:
            rows = await self._select_ordered(ordering)
            if rows is not None:
                return rows
        raise StoreError("Could not list videos with any ordering")

    async def get_by_slug(self, slug: str) -> VideoRecord | None:
        async with self.sessions() as session:
            try:
                res = await session.execute(select(Video).where(Video.slug == slug).limit(1))
            except SQLAlchemyError as e:
                log.error(f"get_by_slug({slug!r}) error: {e}")
                raise StoreError(str(e)) from e
            obj = res.scalar_one_or_none()
            return _to_record(obj) if obj else None

    async def insert(self, record: NewVideo) -> None:
        async with self.sessions() as session:
            session.add(Video(**record.model_dump()))
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                log.error(f"insert({record.slug!r}) violated a constraint: {e.orig}")
                raise StoreError(f"Video with slug {record.slug!r} already exists") from e
            except SQLAlchemyError as e:
                await session.rollback()
                log.error(f"insert({record.slug!r}) error: {e}")
                raise StoreError(str(e)) from e

    async def delete_by_slug(self, slug: str) -> str | None:
        q = delete(Video).where(Video.slug == slug).returning(Video.file_path)
        async with self.sessions() as session:
            try:
                res = await session.execute(q)
                file_path = res.scalar_one_or_none()
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                log.error(f"delete_by_slug({slug!r}) error: {e}")
                raise StoreError(str(e)) from e
            return file_path

    async def aclose(self) -> None:
        await self.engine.dispose()
