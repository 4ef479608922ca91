# osaka/storage.py
import logging
import mimetypes
import re
import time
import uuid
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import httpx

from .errors import UploadError, ValidationError

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 5 * 1024 * 1024
CACHE_CONTROL_SECONDS = 3600

HERO_BUCKET = "hero-images"
PRODUCT_BUCKET = "product-images"

_EXTENSION = re.compile(r"[a-z0-9]{1,8}")


def file_extension(filename: str, content_type: str = "") -> str:
    """Lower-cased extension for an object key.

    Client filenames are untrusted: anything that is not a short alphanumeric
    suffix is replaced by the extension of the declared content type, or "bin".
    """
    _, dot, ext = (filename or "").rpartition(".")
    ext = ext.lower()
    if dot and _EXTENSION.fullmatch(ext):
        return ext
    guessed = mimetypes.guess_extension((content_type or "").split(";")[0].strip())
    if guessed and _EXTENSION.fullmatch(guessed.lstrip(".")):
        return guessed.lstrip(".")
    return "bin"


@dataclass(frozen=True)
class ImageFile:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return file_extension(self.filename, self.content_type)


def check_image(image: ImageFile) -> None:
    """Reject anything that is not an image or is over 5 MiB. No network involved."""
    violations = []
    if not (image.content_type or "").startswith("image/"):
        violations.append("file_not_image")
    if image.size > MAX_IMAGE_BYTES:
        violations.append("file_too_large")
    if violations:
        logger.info("rejected upload %r: %s", image.filename, violations)
        raise ValidationError(violations)


def object_key(extension: str, prefix: str = "") -> str:
    token = uuid.uuid4().hex[:12]
    millis = int(time.time() * 1000)
    return f"{prefix}{token}-{millis}.{extension}"


# ---------------------------
# Object stores
# ---------------------------
class ObjectStore:
    async def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        raise NotImplementedError

    def public_url(self, bucket: str, key: str) -> str:
        raise NotImplementedError


class SupabaseObjectStore(ObjectStore):
    def __init__(self, url: str, key: str, timeout: float = 30.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = url.rstrip("/")
        self.key = key
        self.timeout = timeout
        self._transport = transport

    async def put(self, bucket, key, data, content_type):
        headers = {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Content-Type": content_type,
            "cache-control": str(CACHE_CONTROL_SECONDS),
            "x-upsert": "false",
        }
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout,
                                     transport=self._transport) as client:
            try:
                r = await client.post(f"/storage/v1/object/{bucket}/{key}", content=data, headers=headers)
            except httpx.HTTPError as e:
                logger.error("upload %s/%s failed: %s", bucket, key, e)
                raise UploadError(f"upload failed: {e}") from e
        if r.status_code >= 400:
            logger.error("upload %s/%s rejected: HTTP %s %s", bucket, key, r.status_code, r.text)
            raise UploadError(f"upload rejected: HTTP {r.status_code}")

    def public_url(self, bucket, key):
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{key}"


class MemoryObjectStore(ObjectStore):
    def __init__(self, base_url: str = "http://localhost:8085/media"):
        self.base_url = base_url.rstrip("/")
        self.objects: Dict[Tuple[str, str], Tuple[bytes, str]] = {}

    async def put(self, bucket, key, data, content_type):
        if (bucket, key) in self.objects:
            raise UploadError(f"object {bucket}/{key} already exists")
        self.objects[(bucket, key)] = (data, content_type)

    def get(self, bucket: str, key: str) -> Optional[Tuple[bytes, str]]:
        return self.objects.get((bucket, key))

    def public_url(self, bucket, key):
        return f"{self.base_url}/{bucket}/{key}"


# ---------------------------
# Uploader
# ---------------------------
class ImageUploader:
    def __init__(self, object_store: ObjectStore, bucket: str, key_prefix: str = ""):
        self.object_store = object_store
        self.bucket = bucket
        self.key_prefix = key_prefix

    async def upload(self, image: ImageFile) -> str:
        """Store ``image`` and return its public URL.

        Raises ValidationError before any network call for a non-image or an
        oversized file, and UploadError when the bucket rejects the write.
        Nothing is retried.
        """
        check_image(image)
        key = object_key(image.extension, self.key_prefix)
        await self.object_store.put(self.bucket, key, image.data, image.content_type)
        logger.info("uploaded %s to bucket %s (%d bytes)", key, self.bucket, image.size)
        return self.object_store.public_url(self.bucket, key)


def uploader_for(kind: str, object_store: ObjectStore) -> ImageUploader:
    if kind == "hero":
        return ImageUploader(object_store, HERO_BUCKET)
    if kind == "product":
        return ImageUploader(object_store, PRODUCT_BUCKET, key_prefix="product-")
    raise ValueError(f"unknown upload kind {kind!r}")
