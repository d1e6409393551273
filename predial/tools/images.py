# images.py — Check and shrink photos before they go to the vision model
#
# Uploads arrive as base64 data URLs. Anything Pillow can't open is
# rejected; anything wider or taller than MAX_IMAGE_SIDE is scaled down
# (aspect ratio kept) and re-encoded as JPEG.

from __future__ import annotations

import base64
import binascii
import io
import logging

from PIL import Image, UnidentifiedImageError

from predial.engine.config import MAX_IMAGE_SIDE

logger = logging.getLogger(__name__)

JPEG_QUALITY = 85


def prepare_image(data: str, mime_type: str, max_side: int = MAX_IMAGE_SIDE) -> tuple[str, str]:
    """Return (base64, mime_type) ready for the model.

    Raises ValueError when ``data`` is not base64 or not an image.
    """
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Imagem inválida: conteúdo base64 corrompido.") from exc

    try:
        img = Image.open(io.BytesIO(raw))
        img.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError("Imagem inválida: formato não reconhecido.") from exc

    if max(img.width, img.height) <= max_side:
        return data, mime_type

    ratio = max_side / max(img.width, img.height)
    new_size = (max(1, int(img.width * ratio)), max(1, int(img.height * ratio)))
    img = img.resize(new_size, Image.LANCZOS)
    if img.mode in ("RGBA", "P", "LA"):
        img = img.convert("RGB")

    buf = io.BytesIO()
    img.save(buf, "JPEG", quality=JPEG_QUALITY, optimize=True)
    logger.info("Image resized to %dx%d for analysis", *new_size)
    return base64.b64encode(buf.getvalue()).decode("ascii"), "image/jpeg"
