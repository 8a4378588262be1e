"""Image preprocessing for meal photos before they reach the vision pipeline."""
import base64
import logging
from io import BytesIO
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from snapcoach.config import settings
from snapcoach.services.errors import InputError

logger = logging.getLogger(__name__)

# JPEG qualities tried in order until the output fits the byte budget
QUALITY_STEPS = (85, 75, 65, 55, 45, 35)


def compress_image(
    data: bytes,
    max_bytes: Optional[int] = None,
    max_edge: Optional[int] = None,
) -> bytes:
    """
    Downscale and re-encode an image as JPEG.

    Args:
        data: Original image bytes (any format Pillow can open)
        max_bytes: Target maximum size in bytes (default settings.image_max_bytes)
        max_edge: Maximum length of the long edge in pixels (default settings.image_max_edge)

    Returns:
        JPEG bytes. If even the lowest quality step exceeds max_bytes, the
        smallest encoding is returned.

    Raises:
        InputError: If no data was supplied or it is not a readable image
    """
    if not data:
        raise InputError("No image provided")

    max_bytes = max_bytes or settings.image_max_bytes
    max_edge = max_edge or settings.image_max_edge

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            # Re-encoding drops EXIF, so bake the orientation into the pixels first
            img = ImageOps.exif_transpose(img)
            # Convert RGBA/P/LA to RGB on a white background
            if img.mode != "RGB":
                rgb_img = Image.new("RGB", img.size, (255, 255, 255))
                rgba = img.convert("RGBA")
                rgb_img.paste(rgba, mask=rgba.split()[3])
                img = rgb_img

            # Resize if too large
            if max(img.size) > max_edge:
                img.thumbnail((max_edge, max_edge), Image.Resampling.LANCZOS)

            encoded = b""
            for quality in QUALITY_STEPS:
                buffer = BytesIO()
                img.save(buffer, format="JPEG", optimize=True, quality=quality)
                encoded = buffer.getvalue()
                if len(encoded) <= max_bytes:
                    break
    except (UnidentifiedImageError, OSError) as e:
        raise InputError(f"Could not read image: {e}") from e

    if len(encoded) > max_bytes:
        logger.warning(
            "Image still %d bytes after compression (target %d)", len(encoded), max_bytes
        )
    logger.debug("Compressed image %d -> %d bytes", len(data), len(encoded))
    return encoded


def to_data_uri(data: bytes, media_type: str = "image/jpeg") -> str:
    """Encode image bytes as a data URI for history snapshots."""
    return f"data:{media_type};base64,{base64.standard_b64encode(data).decode('utf-8')}"
