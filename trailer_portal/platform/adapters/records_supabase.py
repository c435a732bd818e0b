import logging
from typing import Sequence
import httpx
from trailer_portal.core.errors import StoreError
from trailer_portal.modules.videos.schemas import DEFAULT_ORDERINGS, NewVideo, Ordering, VideoRecord
from trailer_portal.platform.ports.record_store import RecordStorePort
from trailer_portal.platform.adapters.supabase_http import error_detail

log = logging.getLogger("records.supabase")

class SupabaseRecordStore(RecordStorePort):
    """The `videos` table through Supabase's PostgREST endpoint."""

    def __init__(self, client: httpx.AsyncClient, table: str = "videos"):
        self.client = client
        self.path = f"/rest/v1/{table}"

    async def _request(self, method: str, **kwargs) -> httpx.Response:
        try:
            return await self.client.request(method, self.path, **kwargs)
        except httpx.RequestError as e:
            log.error(f"{method} {self.path} failed: {e}")
            raise StoreError(f"Record store unreachable: {e}") from e

    async def _select_ordered(self, ordering: Ordering) -> list[VideoRecord] | None:
        direction = "desc" if ordering.descending else "asc"
        res = await self._request("GET", params={"select": "*", "order": f"{ordering.column}.{direction}"})
        if res.is_error:
            log.warning(f"Listing ordered by {ordering.column} rejected: {error_detail(res)}")
            return None
        return [VideoRecord.model_validate(row) for row in res.json()]

    async def list_all(self, orderings: Sequence[Ordering] = DEFAULT_ORDERINGS) -> list[VideoRecord]:
        for ordering in orderings:
            rows = await self._select_ordered(ordering)
            if rows is not None:
                return rows
        raise StoreError("Could not list videos with any ordering")

    async def get_by_slug(self, slug: str) -> VideoRecord | None:
        res = await self._request("GET", params={"select": "*", "slug": f"eq.{slug}", "limit": "1"})
        if res.is_error:
            detail = error_detail(res)
            log.error(f"get_by_slug({slug!r}) error: {detail}")
            raise StoreError(detail)
        rows = res.json()
        return VideoRecord.model_validate(rows[0]) if rows else None

    async def insert(self, record: NewVideo) -> None:
        res = await self._request("POST", json=[record.to_row()], headers={"Prefer": "return=minimal"})
        if res.is_error:
            detail = error_detail(res)
            log.error(f"insert({record.slug!r}) error: {detail}")
            raise StoreError(detail)

    async def delete_by_slug(self, slug: str) -> str | None:
        res = await self._request(
            "DELETE",
            params={"slug": f"eq.{slug}", "select": "file_path"},
            headers={"Prefer": "return=representation"},
        )
        if res.is_error:
            detail = error_detail(res)
            log.error(f"delete_by_slug({slug!r}) error: {detail}")
            raise StoreError(detail)
        rows = res.json()
        return rows[0].get("file_path") if rows else None

    async def aclose(self) -> None:
        # the shared client is closed by ProviderRegistry
        return None
