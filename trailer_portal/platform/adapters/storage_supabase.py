import logging
from urllib.parse import quote
import httpx
from trailer_portal.core.errors import StoreError
from trailer_portal.platform.ports.object_storage import ObjectStoragePort
from trailer_portal.platform.adapters.supabase_http import error_detail

log = logging.getLogger("storage.supabase")

class SupabaseStorage(ObjectStoragePort):
    def __init__(self, client: httpx.AsyncClient, supabase_url: str, bucket: str):
        self.client = client
        self.public_base = f"{supabase_url.rstrip('/')}/storage/v1/object/public/{bucket}"
        self.bucket = bucket

    async def put(self, path: str, data: bytes, content_type: str) -> None:
        try:
            res = await self.client.post(
                f"/storage/v1/object/{self.bucket}/{quote(path)}",
                content=data,
                headers={"Content-Type": content_type, "x-upsert": "true"},
            )
        except httpx.RequestError as e:
            log.error(f"upload of {path} failed: {e}")
            raise StoreError(f"Blob store unreachable: {e}") from e
        if res.is_error:
            detail = error_detail(res)
            log.error(f"upload of {path} rejected: {detail}")
            raise StoreError(detail)

    def public_url(self, path: str) -> str:
        return f"{self.public_base}/{quote(path)}"

    async def remove(self, path: str) -> None:
        try:
            res = await self.client.request(
                "DELETE", f"/storage/v1/object/{self.bucket}", json={"prefixes": [path]}
            )
        except httpx.RequestError as e:
            log.warning(f"remove of {path} failed: {e}")
            return
        if res.is_error:
            log.warning(f"remove of {path} rejected: {error_detail(res)}")

    async def aclose(self) -> None:
        # the shared client is closed by ProviderRegistry
        return None
