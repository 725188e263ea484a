"""Image format conversion with Pillow."""

import io

from PIL import Image

from ..utils.exceptions import ImageError


# Pillow format name -> file extension
EXTENSIONS = {"jpeg": "jpg", "jpg": "jpg", "webp": "webp", "png": "png", "gif": "gif"}
MIME_TYPES = {"jpg": "image/jpeg", "webp": "image/webp", "png": "image/png", "gif": "image/gif"}


def extension_for(image_format: str) -> str:
    """File extension (no dot) for a Pillow format name."""
    fmt = image_format.lower()
    return EXTENSIONS.get(fmt, fmt)


def mime_type_for_format(image_format: str) -> str:
    return MIME_TYPES.get(extension_for(image_format), "application/octet-stream")


def transcode(data: bytes, image_format: str, quality: int) -> bytes:
    """Re-encode image bytes in ``image_format``.

    Args:
        data: Source image bytes in any format Pillow can read
        image_format: Target format name (``webp``, ``jpeg``, ``png``)
        quality: Encoder quality, 1-100

    Returns:
        Encoded image bytes

    Raises:
        ImageError: If the source cannot be decoded or the target encoded
    """
    fmt = "JPEG" if image_format.lower() in {"jpg", "jpeg"} else image_format.upper()
    try:
        with Image.open(io.BytesIO(data)) as image:
            has_alpha = "A" in image.getbands() or "transparency" in image.info
            if fmt == "JPEG":
                converted = image.convert("RGB")
            elif image.mode not in ("RGB", "RGBA"):
                converted = image.convert("RGBA" if has_alpha else "RGB")
            else:
                converted = image
            out = io.BytesIO()
            converted.save(out, format=fmt, quality=quality)
    except (OSError, ValueError, KeyError, Image.DecompressionBombError) as e:
        raise ImageError(f"Failed to convert image to {fmt}: {e}") from e
    return out.getvalue()
