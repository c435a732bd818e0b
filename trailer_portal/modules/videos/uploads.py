import os
import logging
import tempfile
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator
import aiofiles
import aiofiles.os
from fastapi import UploadFile
from trailer_portal.core.errors import ValidationError

log = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 300 * 1024 * 1024
CHUNK_SIZE = 1024 * 1024

# Declared content type -> stored extension
VIDEO_EXTENSIONS = {
    "video/mp4": "mp4",
    "video/webm": "webm",
    "video/ogg": "ogv",
}
DEFAULT_EXTENSION = "mp4"
STORAGE_PREFIX = "trailers/"

def extension_for(content_type: str | None) -> str:
    return VIDEO_EXTENSIONS.get((content_type or "").lower(), DEFAULT_EXTENSION)

def storage_path(slug: str, content_type: str | None, timestamp_ms: int) -> str:
    return f"{STORAGE_PREFIX}{timestamp_ms}_{slug}.{extension_for(content_type)}"

def check_content_type(content_type: str | None) -> str:
    ct = (content_type or "").split(";")[0].strip().lower()
    if ct not in VIDEO_EXTENSIONS:
        raise ValidationError("Video format must be mp4, webm or ogg.")
    return ct

@dataclass
class StagedUpload:
    path: str
    size: int
    content_type: str

    async def read(self) -> bytes:
        async with aiofiles.open(self.path, "rb") as f:
            return await f.read()

async def _discard(path: str) -> None:
    try:
        await aiofiles.os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        log.warning(f"Could not remove temporary upload {path}: {e}")

@asynccontextmanager
async def staged_upload(
    upload: UploadFile, content_type: str, max_bytes: int = MAX_UPLOAD_BYTES, tmp_dir: str | None = None
) -> AsyncIterator[StagedUpload]:
    """Copy the multipart file part into a temp file; the file is removed on every exit path."""
    directory = tmp_dir or tempfile.gettempdir()
    path = os.path.join(directory, f"upload_{uuid.uuid4().hex}.{extension_for(content_type)}")
    size = 0
    try:
        async with aiofiles.open(path, "wb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    raise ValidationError(f"Video exceeds the {max_bytes // (1024 * 1024)} MB limit.")
                await out.write(chunk)
        if size == 0:
            raise ValidationError("Uploaded file is empty.")
        yield StagedUpload(path=path, size=size, content_type=content_type)
    finally:
        await _discard(path)
