"""Profile image uploads.

An upload is accepted when it is at most ``max_upload_size`` bytes and
its leading bytes identify it as JPEG, PNG, or GIF; the declared
content type is not trusted. Accepted images are saved under
``upload_dir`` with a random name.
"""

import logging
import secrets
import time
from pathlib import Path

from candlewax.config import AppConfig
from candlewax.http.forms import UploadFile

logger = logging.getLogger("candlewax.site")

_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\xff\xd8\xff", "jpg"),
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
)


def image_type(content: bytes) -> str | None:
    """``"jpg"``, ``"png"``, or ``"gif"`` from the file's magic bytes."""
    for signature, extension in _SIGNATURES:
        if content.startswith(signature):
            return extension
    return None


class ProfileImages:
    __slots__ = ("_directory", "_max_size")

    def __init__(self, config: AppConfig) -> None:
        self._directory = Path(config.upload_dir)
        self._max_size = config.max_upload_size

    @property
    def directory(self) -> Path:
        return self._directory

    async def store(self, upload: UploadFile) -> str | None:
        """Save ``upload`` and return its new file name, or None if rejected."""
        content = await upload.read()
        extension = image_type(content)
        if extension is None or upload.size > self._max_size:
            return None
        name = f"{secrets.token_hex(3)}{int(time.time())}.{extension}"
        self._directory.mkdir(parents=True, exist_ok=True)
        await upload.save(self._directory / name)
        logger.info("Stored profile image %s (%d bytes)", name, upload.size)
        return name

    def remove(self, name: str) -> None:
        """Delete a previously stored image; names outside the directory are ignored."""
        if not name:
            return
        path = self._directory / name
        if path.parent == self._directory and path.is_file():
            path.unlink()
