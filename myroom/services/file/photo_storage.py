"""
Photo Storage

Blob store for listing photos. Files are written under the upload directory
and served back from UPLOAD_BASE_URL; the listing only keeps the URL.
"""

import logging
import os
import re
from pathlib import Path
from typing import Callable, Iterable, Optional

import aiofiles

from myroom.core.exceptions import AuthUnavailableError, ValidationError, WriteFailureError
from myroom.core.security import Principal
from myroom.core.utils import current_millis

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def build_photo_key(owner_id: str, filename: str, now: int) -> str:
    """Storage key ``room_images/<owner>/<filename>_<millis>``."""
    safe_name = _UNSAFE_CHARS.sub("_", Path(filename).name).strip("._") or "photo"
    return f"room_images/{owner_id}/{safe_name}_{now}"


class LocalPhotoStorage:
    """
    Filesystem blob store.

    ``upload`` is the only operation the listing workflow needs: bytes in,
    public URL out.
    """

    def __init__(
        self,
        upload_dir: str,
        base_url: str = "/uploads",
        allowed_extensions: Iterable[str] = ("jpg", "jpeg", "png"),
        max_size: int = 5 * 1024 * 1024,
        clock: Callable[[], int] = current_millis,
    ) -> None:
        self.upload_dir = Path(upload_dir)
        self.base_url = base_url.rstrip("/")
        self.allowed_extensions = {ext.lower().lstrip(".") for ext in allowed_extensions}
        self.max_size = max_size
        self._clock = clock

    def validate(self, filename: Optional[str], size: int) -> None:
        if not filename:
            raise ValidationError("No image selected.")
        extension = Path(filename).suffix.lower().lstrip(".")
        if extension not in self.allowed_extensions:
            raise ValidationError(
                f"Unsupported image type '{extension or filename}'.",
                field_errors={"file": [f"Allowed: {', '.join(sorted(self.allowed_extensions))}"]},
            )
        if size == 0:
            raise ValidationError("Uploaded image is empty.")
        if size > self.max_size:
            raise ValidationError(
                f"Image is larger than {self.max_size // (1024 * 1024)} MB.",
                field_errors={"file": [f"Maximum size is {self.max_size} bytes."]},
            )

    async def upload(self, key: str, data: bytes) -> str:
        """Store ``data`` under ``key`` and return its URL."""
        destination = self.upload_dir / key
        try:
            os.makedirs(destination.parent, exist_ok=True)
            async with aiofiles.open(destination, "wb") as f:
                await f.write(data)
        except OSError as e:
            logger.error(f"Image upload failed for {key}: {e}")
            raise WriteFailureError("Error uploading image.", details={"key": key}) from e

        logger.info(f"Stored photo {key} ({len(data)} bytes)")
        return f"{self.base_url}/{key}"

    async def upload_listing_photo(self, principal: Principal, filename: Optional[str], data: bytes):
        """Validate and store an owner's photo. Returns (key, url)."""
        if not principal.user_id:
            raise AuthUnavailableError("Cannot upload image: Authentication required.")
        self.validate(filename, len(data))
        key = build_photo_key(principal.user_id, filename, self._clock())
        return key, await self.upload(key, data)
