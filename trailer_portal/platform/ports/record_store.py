from typing import Protocol, Sequence, runtime_checkable
from trailer_portal.modules.videos.schemas import NewVideo, Ordering, VideoRecord

@runtime_checkable
class RecordStorePort(Protocol):
    async def list_all(self, orderings: Sequence[Ordering] = ...) -> list[VideoRecord]: ...
    async def get_by_slug(self, slug: str) -> VideoRecord | None: ...
    async def insert(self, record: NewVideo) -> None: ...
    async def delete_by_slug(self, slug: str) -> str | None: ...
    async def aclose(self) -> None: ...
