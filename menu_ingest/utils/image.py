"""Image preparation before OCR.

Menus are photographed on phones: rotated via EXIF, unevenly lit, and often
larger than the OCR service needs. ``prepare_for_ocr`` fixes orientation,
caps the width, stretches contrast, sharpens, and re-encodes as JPEG.
"""

from __future__ import annotations

import io

import structlog
from PIL import Image, ImageFilter, ImageOps

from menu_ingest.config import settings
from menu_ingest.errors import PreprocessingError

logger = structlog.get_logger()


def prepare_for_ocr(
    image_data: bytes,
    *,
    max_width: int | None = None,
    quality: int | None = None,
) -> bytes:
    """Return normalized JPEG bytes for the recognizer.

    Raises:
        PreprocessingError: the bytes are not a decodable image.
    """
    max_width = max_width or settings.preprocess_max_width
    quality = quality or settings.preprocess_jpeg_quality

    try:
        img = Image.open(io.BytesIO(image_data))
        img.load()  # Force full decode to catch truncated files
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise PreprocessingError(f"Could not decode image: {exc}") from exc

    original_size = img.size
    img = ImageOps.exif_transpose(img)
    img = img.convert("RGB")

    w, h = img.size
    if w > max_width:
        # Never upscale; only shrink wide images
        img = img.resize((max_width, max(1, round(h * max_width / w))), Image.LANCZOS)

    img = ImageOps.autocontrast(img, cutoff=1)
    img = img.filter(ImageFilter.SHARPEN)

    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=quality)
    prepared = buf.getvalue()

    logger.debug(
        "image_prepared_for_ocr",
        original_size=original_size,
        prepared_size=img.size,
        bytes_in=len(image_data),
        bytes_out=len(prepared),
    )
    return prepared
