from typing import Protocol, runtime_checkable

@runtime_checkable
class ObjectStoragePort(Protocol):
    async def put(self, path: str, data: bytes, content_type: str) -> None: ...
    def public_url(self, path: str) -> str: ...
    async def remove(self, path: str) -> None: ...
    async def aclose(self) -> None: ...
