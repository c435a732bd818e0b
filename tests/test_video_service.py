import io
import os
import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers
from trailer_portal.core.errors import StoreError, ValidationError
from trailer_portal.modules.videos.service import VideoService

CLOCK_MS = 1700000000000

def upload_file(data: bytes = b"\x00\x00\x00\x18ftypmp42", content_type: str = "video/mp4", filename: str = "clip.mp4"):
    return UploadFile(file=io.BytesIO(data), filename=filename, headers=Headers({"content-type": content_type}))

@pytest.fixture
def service(records, blobs, tmp_path):
    return VideoService(records, blobs, clock=lambda: CLOCK_MS, tmp_dir=str(tmp_path))


async def test_upload_end_to_end(service, records, blobs, tmp_path):
    slug = await service.upload("My Trailer!", upload_file(b"frames"), description=" teaser ", full_url=" https://t.me/full ")
    assert slug == "my-trailer"

    path = f"trailers/{CLOCK_MS}_my-trailer.mp4"
    assert blobs.objects[path] == (b"frames", "video/mp4")

    record = await records.get_by_slug("my-trailer")
    assert record.file_path == path
    assert record.url == blobs.public_url(path)
    assert record.title == "My Trailer!"
    assert record.description == "teaser"
    assert record.full_url == "https://t.me/full"
    assert os.listdir(tmp_path) == []

async def test_upload_allocates_next_free_slug(service, records):
    records.seed("my-trailer", "My Trailer")
    records.seed("my-trailer-2", "My Trailer")
    assert await service.upload("my trailer", upload_file()) == "my-trailer-3"

async def test_upload_extension_follows_content_type(service, blobs):
    await service.upload("Clip", upload_file(content_type="video/webm", filename="clip.webm"))
    assert list(blobs.objects) == [f"trailers/{CLOCK_MS}_clip.webm"]

async def test_non_video_is_rejected_before_any_store_call(service, records, blobs):
    with pytest.raises(ValidationError):
        await service.upload("Poster", upload_file(content_type="image/png", filename="poster.png"))
    assert records.calls == []
    assert blobs.objects == {}

@pytest.mark.parametrize("title", [None, "", "   "])
async def test_title_is_required(service, records, title):
    with pytest.raises(ValidationError):
        await service.upload(title, upload_file())
    assert records.calls == []

async def test_file_is_required(service, records):
    with pytest.raises(ValidationError):
        await service.upload("Title", None)
    assert records.calls == []

async def test_oversized_file_is_rejected_and_cleaned_up(records, blobs, tmp_path):
    service = VideoService(records, blobs, max_upload_bytes=10, tmp_dir=str(tmp_path))
    with pytest.raises(ValidationError, match="limit"):
        await service.upload("Big", upload_file(b"x" * 11))
    assert blobs.objects == {}
    assert records.calls == []
    assert os.listdir(tmp_path) == []

async def test_empty_file_is_rejected(service, blobs):
    with pytest.raises(ValidationError):
        await service.upload("Empty", upload_file(b""))
    assert blobs.objects == {}

async def test_blob_failure_aborts_before_insert(service, records, blobs, tmp_path):
    blobs.fail_put = True
    with pytest.raises(StoreError):
        await service.upload("Clip", upload_file())
    assert not any(call[0] == "insert" for call in records.calls)
    assert os.listdir(tmp_path) == []

async def test_insert_failure_removes_uploaded_blob(service, records, blobs, tmp_path):
    records.fail_insert = True
    with pytest.raises(StoreError):
        await service.upload("Clip", upload_file())
    path = f"trailers/{CLOCK_MS}_clip.mp4"
    assert blobs.removed == [path]
    assert blobs.objects == {}
    assert os.listdir(tmp_path) == []


async def test_delete_removes_row_then_blob(service, records, blobs):
    records.seed("a", "A", file_path="trailers/1_a.mp4")
    blobs.objects["trailers/1_a.mp4"] = (b"x", "video/mp4")
    assert await service.delete("a") is True
    assert await records.get_by_slug("a") is None
    assert blobs.removed == ["trailers/1_a.mp4"]

async def test_delete_of_missing_slug(service, blobs):
    assert await service.delete("missing") is False
    assert blobs.removed == []

async def test_delete_failure_propagates(service, records, blobs):
    records.seed("a", "A")
    records.fail_delete = True
    with pytest.raises(StoreError):
        await service.delete("a")
    assert blobs.removed == []
