# tests/test_storage.py
import asyncio
import re

import httpx
import pytest

from osaka.errors import UploadError, ValidationError
from osaka.storage import (
    HERO_BUCKET, MAX_IMAGE_BYTES, ImageFile, MemoryObjectStore, SupabaseObjectStore,
    check_image, file_extension, object_key, uploader_for,
)

MIB = 1024 * 1024


class CountingObjects(MemoryObjectStore):
    def __init__(self):
        super().__init__("https://cdn.example")
        self.puts = 0

    async def put(self, bucket, key, data, content_type):
        self.puts += 1
        await super().put(bucket, key, data, content_type)


def test_check_image_limits():
    check_image(ImageFile("ok.jpg", "image/jpeg", b"0" * MAX_IMAGE_BYTES))
    with pytest.raises(ValidationError) as exc:
        check_image(ImageFile("big.jpg", "image/jpeg", b"0" * (MAX_IMAGE_BYTES + 1)))
    assert exc.value.violations == ["file_too_large"]


def test_non_image_and_oversized_report_both():
    with pytest.raises(ValidationError) as exc:
        check_image(ImageFile("notes.pdf", "application/pdf", b"0" * (6 * MIB)))
    assert exc.value.violations == ["file_not_image", "file_too_large"]


def test_object_key_format():
    key = object_key(ImageFile("Living Room.JPEG", "image/jpeg", b"").extension, prefix="product-")
    assert re.fullmatch(r"product-[0-9a-f]{12}-\d+\.jpeg", key)
    assert object_key("png") != object_key("png")


def test_extension_falls_back_to_content_type():
    assert file_extension("tv.png/../../product-images/owned", "image/png") == "png"
    assert file_extension("../../etc/passwd", "image/png") == "png"
    assert file_extension("photo", "image/png") == "png"
    assert file_extension("x.verylongextension", "application/x-unknown") == "bin"


def test_path_like_filename_stays_inside_bucket():
    objects = CountingObjects()
    url = asyncio.run(uploader_for("hero", objects).upload(
        ImageFile("tv.png/../../product-images/owned", "image/png", b"png")))
    key = url[len(f"https://cdn.example/{HERO_BUCKET}/"):]
    assert re.fullmatch(r"[0-9a-f]{12}-\d+\.png", key)
    assert objects.get(HERO_BUCKET, key) == (b"png", "image/png")


def test_rejected_image_never_reaches_bucket():
    objects = CountingObjects()
    uploader = uploader_for("hero", objects)
    with pytest.raises(ValidationError):
        asyncio.run(uploader.upload(ImageFile("huge.png", "image/png", b"0" * (6 * MIB))))
    with pytest.raises(ValidationError):
        asyncio.run(uploader.upload(ImageFile("doc.txt", "text/plain", b"hello")))
    assert objects.puts == 0


def test_upload_returns_public_url_of_stored_object():
    objects = CountingObjects()
    url = asyncio.run(uploader_for("hero", objects).upload(ImageFile("hero.webp", "image/webp", b"RIFF")))
    assert url.startswith(f"https://cdn.example/{HERO_BUCKET}/")
    key = url.rsplit("/", 1)[-1]
    assert objects.get(HERO_BUCKET, key) == (b"RIFF", "image/webp")


def test_memory_store_refuses_to_overwrite():
    objects = MemoryObjectStore()
    asyncio.run(objects.put(HERO_BUCKET, "a.png", b"1", "image/png"))
    with pytest.raises(UploadError):
        asyncio.run(objects.put(HERO_BUCKET, "a.png", b"2", "image/png"))
    assert objects.get(HERO_BUCKET, "a.png") == (b"1", "image/png")


def test_unknown_upload_kind():
    with pytest.raises(ValueError):
        uploader_for("banner", MemoryObjectStore())


# ---------------------------
# Supabase Storage
# ---------------------------
def test_supabase_put_sends_expected_request():
    seen = {}

    def handler(request: httpx.Request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["headers"] = request.headers
        seen["body"] = request.content
        return httpx.Response(200, json={"Key": "product-images/x.png"})

    store = SupabaseObjectStore("https://proj.supabase.co/", "anon", transport=httpx.MockTransport(handler))
    url = asyncio.run(uploader_for("product", store).upload(ImageFile("x.PNG", "image/png", b"png")))

    assert seen["method"] == "POST"
    assert seen["path"].startswith("/storage/v1/object/product-images/product-")
    assert seen["headers"]["authorization"] == "Bearer anon"
    assert seen["headers"]["apikey"] == "anon"
    assert seen["headers"]["cache-control"] == "3600"
    assert seen["headers"]["x-upsert"] == "false"
    assert seen["headers"]["content-type"] == "image/png"
    assert seen["body"] == b"png"
    assert url == "https://proj.supabase.co/storage/v1/object/public/product-images/" + seen["path"].rsplit("/", 1)[-1]


def test_supabase_rejection_is_upload_error():
    store = SupabaseObjectStore("https://proj.supabase.co", "anon",
                                transport=httpx.MockTransport(lambda r: httpx.Response(409, text="Duplicate")))
    with pytest.raises(UploadError):
        asyncio.run(store.put(HERO_BUCKET, "a.png", b"1", "image/png"))


def test_supabase_network_failure_is_upload_error():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    store = SupabaseObjectStore("https://proj.supabase.co", "anon", transport=httpx.MockTransport(handler))
    with pytest.raises(UploadError):
        asyncio.run(store.put(HERO_BUCKET, "a.png", b"1", "image/png"))
