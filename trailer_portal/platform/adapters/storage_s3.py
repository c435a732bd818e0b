import asyncio
import logging
import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from urllib.parse import quote
from trailer_portal.core.config import Settings
from trailer_portal.core.errors import StoreError
from trailer_portal.platform.ports.object_storage import ObjectStoragePort

log = logging.getLogger("storage.s3")

class S3Storage(ObjectStoragePort):
    """S3-compatible bucket; boto3 is blocking, so calls run in a worker thread."""

    def __init__(self, settings: Settings, client=None):
        if client is None:
            session = boto3.session.Session(
                aws_access_key_id=settings.S3_ACCESS_KEY,
                aws_secret_access_key=settings.S3_SECRET_KEY,
                region_name=settings.S3_REGION,
            )
            client = session.client(
                "s3",
                endpoint_url=settings.S3_ENDPOINT_URL,
                config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
            )
        self.s3 = client
        self.bucket = settings.S3_BUCKET
        self.public_base = settings.S3_PUBLIC_BASE_URL

    async def put(self, path: str, data: bytes, content_type: str) -> None:
        try:
            await asyncio.to_thread(
                self.s3.put_object, Bucket=self.bucket, Key=path, Body=data, ContentType=content_type
            )
        except (BotoCoreError, ClientError) as e:
            log.error(f"put_object {path} failed: {e}")
            raise StoreError(str(e)) from e

    def public_url(self, path: str) -> str:
        return f"{self.public_base}/{quote(path)}"

    async def remove(self, path: str) -> None:
        try:
            await asyncio.to_thread(self.s3.delete_object, Bucket=self.bucket, Key=path)
        except (BotoCoreError, ClientError) as e:
            log.warning(f"delete_object {path} failed: {e}")

    async def aclose(self) -> None:
        return None
