import os
import logging
import aiofiles
import aiofiles.os
from urllib.parse import quote
from trailer_portal.core.errors import StoreError
from trailer_portal.platform.ports.object_storage import ObjectStoragePort

log = logging.getLogger("storage.local")

class LocalFilesystemStorage(ObjectStoragePort):
    """Development blob store; the app serves `root` under `public_base`."""

    def __init__(self, root: str, public_base: str = "/media"):
        self.root = os.path.abspath(root)
        self.public_base = public_base.rstrip("/")
        os.makedirs(self.root, exist_ok=True)

    def _path(self, key: str) -> str:
        safe = key.strip("/").replace("..", "")
        return os.path.join(self.root, safe)

    async def put(self, path: str, data: bytes, content_type: str) -> None:
        target = self._path(path)
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
            async with aiofiles.open(target, "wb") as f:
                await f.write(data)
        except OSError as e:
            log.error(f"write of {path} failed: {e}")
            raise StoreError(f"Could not store {path}: {e.strerror}") from e

    def public_url(self, path: str) -> str:
        return f"{self.public_base}/{quote(path.strip('/'))}"

    async def remove(self, path: str) -> None:
        target = self._path(path)
        try:
            await aiofiles.os.remove(target)
        except OSError as e:
            log.warning(f"remove of {path} failed: {e}")

    async def aclose(self) -> None:
        return None
