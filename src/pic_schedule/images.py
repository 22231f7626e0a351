"""Image loading and validation.

Image files are checked for type and size and read into an
:class:`ImagePayload` holding the raw bytes and MIME type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from pic_schedule.exceptions import InvalidImageError

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 10 * 1024 * 1024
"""Largest accepted image (10 MB)."""

_MIME_TYPES_BY_SUFFIX = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
}

SUPPORTED_MIME_TYPES: frozenset[str] = frozenset(_MIME_TYPES_BY_SUFFIX.values())


@dataclass(frozen=True)
class ImagePayload:
    """Raw image bytes ready to send to the vision model.

    Attributes:
        data: The encoded image file contents.
        mime_type: One of :data:`SUPPORTED_MIME_TYPES`.
        name: Display name (file name) for logs and reports.
    """

    data: bytes
    mime_type: str
    name: str = "<image>"

    @property
    def size(self) -> int:
        return len(self.data)


def load_image(path: str | Path) -> ImagePayload:
    """Read and validate an image file.

    Args:
        path: Path to a JPEG, PNG, GIF, BMP or WebP file.

    Returns:
        The loaded :class:`ImagePayload`.

    Raises:
        FileNotFoundError: If *path* does not exist.
        InvalidImageError: If *path* is not a file, has an unsupported
            type, is empty, or exceeds :data:`MAX_IMAGE_BYTES`.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")
    if not path.is_file():
        raise InvalidImageError(f"Not a file: {path}")

    mime_type = _MIME_TYPES_BY_SUFFIX.get(path.suffix.lower())
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise InvalidImageError(
            f"Please select an image file (JPEG, PNG, GIF, BMP or WebP): {path.name}"
        )

    size = path.stat().st_size
    if size == 0:
        raise InvalidImageError(f"Image file is empty: {path.name}")
    if size > MAX_IMAGE_BYTES:
        raise InvalidImageError(
            "Image file too large. Please select a file under 10MB."
        )

    payload = ImagePayload(data=path.read_bytes(), mime_type=mime_type, name=path.name)
    logger.info("Loaded image %s (%s, %d bytes)", payload.name, mime_type, payload.size)
    return payload
