# backend/app/image_compressor.py

import asyncio
import base64
import binascii
import io
import logging
from typing import Optional, Tuple

from PIL import Image

log = logging.getLogger("tubemaster")

MAX_WIDTH = 1024
JPEG_QUALITY = 70
DEFAULT_TIMEOUT_S = 4.0


def image_to_data_uri(img: Image.Image, fmt: str = "JPEG", **save_kwargs) -> str:
    """
    Returns a base64 data URI for the image, ready to embed in a model message.
    """
    buffered = io.BytesIO()
    img.save(buffered, format=fmt, **save_kwargs)
    b64 = base64.b64encode(buffered.getvalue()).decode("utf-8")
    return f"data:image/{fmt.lower()};base64,{b64}"


def bytes_to_data_uri(data: bytes, content_type: Optional[str] = None) -> str:
    mime = content_type if content_type and content_type.startswith("image/") else "image/png"
    return f"data:{mime};base64,{base64.b64encode(data).decode('utf-8')}"


def decode_data_uri(payload: str) -> bytes:
    """Accepts a `data:...;base64,` URI or a bare base64 string."""
    data = payload.split(",", 1)[1] if payload.startswith("data:") else payload
    return base64.b64decode(data, validate=False)


def target_size(width: int, height: int, max_width: int = MAX_WIDTH) -> Tuple[int, int]:
    """Scale down to max_width keeping the aspect ratio; never upscale."""
    if width <= max_width:
        return width, height
    # half-up rounding, not banker's rounding
    new_height = int(height * max_width / width + 0.5)
    return max_width, max(new_height, 1)


def _flatten_on_white(img: Image.Image) -> Image.Image:
    # JPEG has no alpha channel
    rgba = img.convert("RGBA")
    background = Image.new("RGB", rgba.size, (255, 255, 255))
    background.paste(rgba, mask=rgba.split()[3])
    return background


def _compress_sync(payload: str) -> str:
    try:
        raw = decode_data_uri(payload)
        img = Image.open(io.BytesIO(raw))
        img.load()

        width, height = img.size
        size = target_size(width, height)
        flat = _flatten_on_white(img)
        if size != (width, height):
            flat = flat.resize(size, Image.LANCZOS)

        compressed = image_to_data_uri(flat, "JPEG", quality=JPEG_QUALITY)
    except (binascii.Error, ValueError, OSError, Image.DecompressionBombError) as e:
        log.warning(f"⚠️ Compression failed, sending original: {e}")
        return payload

    if size == (width, height) and len(compressed) >= len(payload):
        return payload
    log.info(f"🗜️ Compressed {width}x{height} -> {size[0]}x{size[1]} ({len(payload)} -> {len(compressed)} chars)")
    return compressed


async def compress_image(payload: str, timeout: float = DEFAULT_TIMEOUT_S) -> str:
    """
    Best-effort downsize + JPEG re-encode before an image goes over the wire.

    Never raises for a bad image: the original payload comes back when
    decoding fails or takes longer than `timeout` seconds.
    """
    if not payload:
        return payload
    try:
        return await asyncio.wait_for(asyncio.to_thread(_compress_sync, payload), timeout=timeout)
    except asyncio.TimeoutError:
        log.warning(f"⏰ Compression timed out after {timeout}s, sending original")
        return payload
