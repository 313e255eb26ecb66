from __future__ import annotations
from PIL import Image, UnidentifiedImageError
import io


ALLOWED_MIME = {"image/jpeg", "image/png", "image/webp", "image/gif"}
EXT_FOR_MIME = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp", "image/gif": "gif"}
_MIME_FOR_FORMAT = {"JPEG": "image/jpeg", "PNG": "image/png", "WEBP": "image/webp", "GIF": "image/gif"}

def sniff_mime(data: bytes) -> str | None:
    # Trust the bytes, not the client's Content-Type header
    try:
        with Image.open(io.BytesIO(data)) as img:
            return _MIME_FOR_FORMAT.get(img.format or "")
    except (UnidentifiedImageError, OSError):
        return None

def validate_proof_image(data: bytes) -> str:
    """
    Check that an upload is a readable photo of an allowed type.
    Returns the detected mime type; raises ValueError otherwise.
    """
    if not data:
        raise ValueError("Image proof is required")
    mime = sniff_mime(data)
    if mime not in ALLOWED_MIME:
        raise ValueError("Unsupported image type")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()  # basic integrity
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise ValueError("Invalid image file")
    return mime

def ext_for_mime(mime: str) -> str:
    return EXT_FOR_MIME.get(mime, "bin")
