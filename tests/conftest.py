from datetime import datetime, timezone
from typing import Sequence
import pytest
from fastapi.testclient import TestClient
from trailer_portal.core.config import Settings
from trailer_portal.core.errors import StoreError
from trailer_portal.main import create_app
from trailer_portal.modules.videos.schemas import DEFAULT_ORDERINGS, NewVideo, Ordering, VideoRecord
from trailer_portal.platform.provider_registry import ProviderRegistry


class InMemoryRecordStore:
    def __init__(self):
        self.rows: list[VideoRecord] = []
        self.calls: list[tuple] = []
        self.fail_list = False
        self.fail_insert = False
        self.fail_delete = False
        self.closed = False
        self._next_id = 1

    def seed(self, slug: str, title: str, **extra) -> VideoRecord:
        record = VideoRecord(
            id=self._next_id,
            slug=slug,
            title=title,
            file_path=extra.pop("file_path", f"trailers/1_{slug}.mp4"),
            url=extra.pop("url", f"https://cdn.test/trailers/1_{slug}.mp4"),
            created_at=datetime.now(timezone.utc),
            **extra,
        )
        self._next_id += 1
        self.rows.append(record)
        return record

    async def list_all(self, orderings: Sequence[Ordering] = DEFAULT_ORDERINGS) -> list[VideoRecord]:
        self.calls.append(("list_all",))
        if self.fail_list:
            raise StoreError("relation videos does not exist")
        return sorted(self.rows, key=lambda r: r.id, reverse=True)

    async def get_by_slug(self, slug: str) -> VideoRecord | None:
        self.calls.append(("get_by_slug", slug))
        return next((r for r in self.rows if r.slug == slug), None)

    async def insert(self, record: NewVideo) -> None:
        self.calls.append(("insert", record.slug))
        if self.fail_insert:
            raise StoreError("duplicate key value violates unique constraint")
        self.seed(**record.model_dump())

    async def delete_by_slug(self, slug: str) -> str | None:
        self.calls.append(("delete_by_slug", slug))
        if self.fail_delete:
            raise StoreError("permission denied for table videos")
        for r in self.rows:
            if r.slug == slug:
                self.rows.remove(r)
                return r.file_path
        return None

    async def aclose(self) -> None:
        self.closed = True


class InMemoryBlobStore:
    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.removed: list[str] = []
        self.fail_put = False
        self.closed = False

    async def put(self, path: str, data: bytes, content_type: str) -> None:
        if self.fail_put:
            raise StoreError("Bucket not found")
        self.objects[path] = (data, content_type)

    def public_url(self, path: str) -> str:
        return f"https://cdn.test/{path}"

    async def remove(self, path: str) -> None:
        self.removed.append(path)
        self.objects.pop(path, None)

    async def aclose(self) -> None:
        self.closed = True


def make_settings(**overrides) -> Settings:
    values = {
        "ENV": "dev",
        "ADMIN_KEY": "secret",
        "SUPABASE_URL": "https://proj.supabase.co",
        "SUPABASE_KEY": "service-role",
        "BASE_URL": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()

@pytest.fixture
def records() -> InMemoryRecordStore:
    return InMemoryRecordStore()

@pytest.fixture
def blobs() -> InMemoryBlobStore:
    return InMemoryBlobStore()

@pytest.fixture
def make_client(records, blobs):
    clients = []

    def _make(**overrides) -> TestClient:
        s = make_settings(**overrides)
        app = create_app(s, ProviderRegistry(s, records=records, blobs=blobs))
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)

@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
