"""Blob store for deal images.

The rest of the application only ever sees the reference string returned by
``save``; it never reads the bytes back.
"""

from __future__ import annotations

import base64
import binascii
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from loguru import logger

ALLOWED_IMAGE_MIMES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class BlobRejected(ValueError):
    """Raised when the payload is not an acceptable image."""


def decode_base64_payload(payload: str) -> tuple[bytes, str | None]:
    """Decode plain base64 or a ``data:<mime>;base64,`` URL.

    Returns the bytes and the mime declared by the data URL, if any.
    """
    declared_mime: str | None = None
    data = payload.strip()
    if data.startswith("data:"):
        header, _, data = data.partition(",")
        if not header.endswith(";base64"):
            raise BlobRejected("Data URL must be base64 encoded")
        declared_mime = header[len("data:") : -len(";base64")] or None
    try:
        return base64.b64decode(data, validate=True), declared_mime
    except (binascii.Error, ValueError) as e:
        raise BlobRejected("Invalid base64 payload") from e


class BlobStore(ABC):
    """Abstract image store returning an opaque reference."""

    def __init__(self, max_bytes: int) -> None:
        self.max_bytes = max_bytes

    def check(self, data: bytes, mime: str) -> None:
        if mime not in ALLOWED_IMAGE_MIMES:
            raise BlobRejected(f"Unsupported image type: {mime}")
        if not data:
            raise BlobRejected("Empty image")
        if len(data) > self.max_bytes:
            raise BlobRejected(f"Image exceeds {self.max_bytes} bytes")

    @abstractmethod
    def save(self, data: bytes, mime: str) -> str:
        """Persist the image and return its reference."""


class LocalBlobStore(BlobStore):
    """Writes images into a local directory and returns ``<public_prefix>/<file>`` references."""

    def __init__(self, directory: str | Path, public_prefix: str, max_bytes: int) -> None:
        super().__init__(max_bytes)
        self._directory = Path(directory)
        self._public_prefix = public_prefix.rstrip("/")

    def save(self, data: bytes, mime: str) -> str:
        self.check(data, mime)
        self._directory.mkdir(parents=True, exist_ok=True)
        filename = f"{uuid.uuid4()}.{ALLOWED_IMAGE_MIMES[mime]}"
        (self._directory / filename).write_bytes(data)
        logger.debug("Stored image {} ({} bytes)", filename, len(data))
        return f"{self._public_prefix}/{filename}"
