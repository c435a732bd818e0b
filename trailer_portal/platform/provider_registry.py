import httpx
from trailer_portal.core.config import Settings
from trailer_portal.core.db import make_engine, make_sessionmaker
from trailer_portal.platform.ports.record_store import RecordStorePort
from trailer_portal.platform.ports.object_storage import ObjectStoragePort
from trailer_portal.platform.adapters.supabase_http import make_supabase_client
from trailer_portal.platform.adapters.records_supabase import SupabaseRecordStore
from trailer_portal.platform.adapters.records_sql import SqlRecordStore
from trailer_portal.platform.adapters.storage_supabase import SupabaseStorage
from trailer_portal.platform.adapters.storage_local import LocalFilesystemStorage
from trailer_portal.platform.adapters.storage_s3 import S3Storage

class ProviderRegistry:
    """Builds the record and blob stores once per process and closes them at shutdown."""

    def __init__(
        self,
        settings: Settings,
        *,
        records: RecordStorePort | None = None,
        blobs: ObjectStoragePort | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self._records = records
        self._blobs = blobs
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    def _supabase_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = make_supabase_client(self.settings, self._transport)
        return self._http

    def records(self) -> RecordStorePort:
        if self._records is None:
            if self.settings.RECORD_STORE_PROVIDER == "postgres":
                engine = make_engine(self.settings)
                self._records = SqlRecordStore(engine, make_sessionmaker(engine))
            else:
                self._records = SupabaseRecordStore(self._supabase_http())
        return self._records

    def blobs(self) -> ObjectStoragePort:
        if self._blobs is None:
            provider = self.settings.OBJECT_STORAGE_PROVIDER
            if provider == "s3":
                self._blobs = S3Storage(self.settings)
            elif provider == "local":
                self._blobs = LocalFilesystemStorage(self.settings.LOCAL_STORAGE_ROOT)
            else:
                self._blobs = SupabaseStorage(
                    self._supabase_http(), self.settings.SUPABASE_URL, self.settings.SUPABASE_BUCKET
                )
        return self._blobs

    async def aclose(self) -> None:
        if self._records is not None:
            await self._records.aclose()
        if self._blobs is not None:
            await self._blobs.aclose()
        if self._http is not None:
            await self._http.aclose()
