"""
Image format checks for analysis uploads.

Two independent gates: the filename extension and the leading magic
bytes. ``validate_image_upload`` applies both plus the size limit.
"""

from typing import Optional

from nutrilink.domain.shared.errors import ValidationError

# Maximum file size: 10MB
MAX_FILE_SIZE = 10 * 1024 * 1024

SUPPORTED_IMAGE_FORMATS = ("jpeg", "jpg", "png", "webp", "gif")

_MIME_BY_EXTENSION = {
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
}

JPEG_MAGIC = b"\xff\xd8\xff"
PNG_MAGIC = b"\x89PNG"
GIF_MAGIC = b"GIF8"
RIFF_MAGIC = b"RIFF"
WEBP_MAGIC = b"WEBP"


def _extension(filename: str) -> Optional[str]:
    if not filename or "." not in filename:
        return None
    return filename.rsplit(".", 1)[1].lower() or None


def is_valid_image_format(filename: str) -> bool:
    """Check the extension against the allow-list (case-insensitive).

    Example:
        >>> is_valid_image_format("photo.JPG"), is_valid_image_format("noextension")
        (True, False)
    """
    return _extension(filename) in _MIME_BY_EXTENSION


def get_image_mime_type(filename: str) -> Optional[str]:
    """Canonical MIME type for a filename, or None if unsupported.

    Example:
        >>> get_image_mime_type("image.jpg")
        'image/jpeg'
    """
    ext = _extension(filename)
    return _MIME_BY_EXTENSION.get(ext) if ext else None


def detect_mime_type_from_buffer(data: bytes) -> Optional[str]:
    """Sniff the MIME type from leading bytes.

    Example:
        >>> detect_mime_type_from_buffer(bytes([0xFF, 0xD8, 0xFF, 0xE0]))
        'image/jpeg'
        >>> detect_mime_type_from_buffer(bytes([0xFF, 0xD8])) is None
        True
    """
    if not data:
        return None

    head = bytes(data[:12])

    if head.startswith(JPEG_MAGIC):
        return "image/jpeg"
    if head.startswith(PNG_MAGIC):
        return "image/png"
    if head.startswith(GIF_MAGIC):
        return "image/gif"
    if len(head) >= 12 and head[:4] == RIFF_MAGIC and head[8:12] == WEBP_MAGIC:
        return "image/webp"
    return None


def validate_image_upload(filename: str, data: bytes) -> str:
    """Apply extension, size and magic-byte gates to an upload.

    Args:
        filename: Client-supplied filename
        data: File contents

    Returns:
        MIME type detected from the contents

    Raises:
        ValidationError: Naming the gate that rejected the upload
    """
    if not is_valid_image_format(filename):
        allowed = ", ".join(SUPPORTED_IMAGE_FORMATS)
        raise ValidationError(f"Invalid image format. Allowed: {allowed}")

    if not data:
        raise ValidationError("Empty image")

    if len(data) > MAX_FILE_SIZE:
        raise ValidationError(f"Image too large. Maximum size: {MAX_FILE_SIZE // (1024 * 1024)}MB")

    mime_type = detect_mime_type_from_buffer(data)
    if mime_type is None:
        raise ValidationError("Image content does not match a supported format")

    return mime_type
