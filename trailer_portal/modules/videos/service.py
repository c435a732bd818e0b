import time
import logging
from typing import Callable
from fastapi import UploadFile
from trailer_portal.core.errors import StoreError, ValidationError
from trailer_portal.modules.videos.schemas import DEFAULT_ORDERINGS, NewVideo, VideoRecord
from trailer_portal.modules.videos.slugs import allocate_slug
from trailer_portal.modules.videos.uploads import (
    MAX_UPLOAD_BYTES, check_content_type, staged_upload, storage_path,
)
from trailer_portal.platform.ports.object_storage import ObjectStoragePort
from trailer_portal.platform.ports.record_store import RecordStorePort

log = logging.getLogger(__name__)

def _now_ms() -> int:
    return int(time.time() * 1000)

class VideoService:
    def __init__(
        self,
        records: RecordStorePort,
        blobs: ObjectStoragePort,
        *,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
        clock: Callable[[], int] = _now_ms,
        tmp_dir: str | None = None,
    ):
        self.records = records
        self.blobs = blobs
        self.max_upload_bytes = max_upload_bytes
        self.clock = clock
        self.tmp_dir = tmp_dir

    async def list(self) -> list[VideoRecord]:
        return await self.records.list_all(DEFAULT_ORDERINGS)

    async def get(self, slug: str) -> VideoRecord | None:
        return await self.records.get_by_slug(slug)

    async def slug_taken(self, slug: str) -> bool:
        return await self.records.get_by_slug(slug) is not None

    async def upload(
        self,
        title: str | None,
        file: UploadFile | None,
        *,
        description: str | None = None,
        full_url: str | None = None,
    ) -> str:
        """Store the trailer and its metadata, returning the newly allocated slug.

        Validation happens before any store call. If the metadata insert fails the
        uploaded blob is removed again, so a failed upload leaves nothing behind
        unless that cleanup fails as well.
        """
        title = (title or "").strip()
        if not title or file is None or not file.filename:
            raise ValidationError("Title and video file are required.")
        content_type = check_content_type(file.content_type)
        if file.size is not None and file.size > self.max_upload_bytes:
            raise ValidationError(f"Video exceeds the {self.max_upload_bytes // (1024 * 1024)} MB limit.")

        async with staged_upload(file, content_type, self.max_upload_bytes, self.tmp_dir) as staged:
            slug = await allocate_slug(title, self.slug_taken)
            path = storage_path(slug, content_type, self.clock())

            data = await staged.read()
            await self.blobs.put(path, data, content_type)
            url = self.blobs.public_url(path)

            record = NewVideo(
                slug=slug,
                title=title,
                description=(description or "").strip(),
                file_path=path,
                url=url,
                full_url=(full_url or "").strip(),
            )
            try:
                await self.records.insert(record)
            except StoreError:
                log.error(f"Metadata insert for {slug} failed, removing uploaded blob {path}")
                await self.blobs.remove(path)
                raise

        log.info(f"Uploaded {slug} ({staged.size} bytes) to {path}")
        return slug

    async def delete(self, slug: str) -> bool:
        """Delete the row, then best-effort remove its blob. False when nothing matched."""
        file_path = await self.records.delete_by_slug(slug)
        if file_path is None:
            return False
        await self.blobs.remove(file_path)
        log.info(f"Deleted {slug} ({file_path})")
        return True
