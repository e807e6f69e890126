"""Client-side JPEG compression for scan uploads.

Scans are shrunk to roughly 100KB before they are sent so that uploads stay
fast on mobile connections. The heuristic is bounded: a few quality steps and
at most one extra downscale, so very detailed images can still end up above
the target.
"""

import base64
import io
import logging
import math
import os
import re
from typing import BinaryIO, Tuple, Union

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

START_QUALITY = 60
QUALITY_STEP = 10
MIN_QUALITY = 10
FALLBACK_QUALITY = 50

_DATA_URL = re.compile(r"^data:([A-Za-z-+/]+);base64,(.+)$", re.S)

ImageSource = Union[str, bytes, os.PathLike, BinaryIO, Image.Image]


def load_image(source: ImageSource) -> Image.Image:
    """Open a path, data URL, raw bytes, file object or PIL image as an RGB image."""
    if isinstance(source, Image.Image):
        img = source
    elif isinstance(source, bytes):
        img = Image.open(io.BytesIO(source))
    elif isinstance(source, str) and source.startswith("data:"):
        m = _DATA_URL.match(source)
        if not m:
            raise ValueError("Malformed data URL")
        img = Image.open(io.BytesIO(base64.b64decode(m.group(2))))
    else:
        img = Image.open(source)

    img = ImageOps.exif_transpose(img)
    if img.mode != "RGB":
        img = img.convert("RGB")
    return img


def encode_jpeg_data_url(img: Image.Image, quality: int) -> str:
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=quality)
    return "data:image/jpeg;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def fit_within(size: Tuple[int, int], max_width: int, max_height: int) -> Tuple[int, int]:
    w, h = size
    if w > max_width or h > max_height:
        scale = min(max_width / w, max_height / h)
        w = round(w * scale)
        h = round(h * scale)
    return max(w, 1), max(h, 1)


def _size_kb(data_url: str) -> float:
    return len(data_url) / 1024


def compress_image_to_base64(
    source: ImageSource,
    max_size_kb: int = 100,
    max_width: int = 800,
    max_height: int = 800,
) -> str:
    """
    Compress an image to a JPEG data URL of at most about max_size_kb.

    Size is measured on the data URL string, which is what goes over the wire.
    """
    original = load_image(source)
    width, height = fit_within(original.size, max_width, max_height)
    img = original.resize((width, height), Image.LANCZOS) if (width, height) != original.size else original

    quality = START_QUALITY
    data_url = encode_jpeg_data_url(img, quality)

    while _size_kb(data_url) > max_size_kb and quality > MIN_QUALITY:
        quality -= QUALITY_STEP
        data_url = encode_jpeg_data_url(img, quality)

    if _size_kb(data_url) > max_size_kb:
        scale = math.sqrt(max_size_kb / _size_kb(data_url))
        width = max(round(width * scale), 1)
        height = max(round(height * scale), 1)
        img = original.resize((width, height), Image.LANCZOS)
        data_url = encode_jpeg_data_url(img, FALLBACK_QUALITY)

    logger.info(
        "Compressed image",
        extra={
            "original_size": original.size,
            "final_size": (width, height),
            "quality": quality,
            "size_kb": round(_size_kb(data_url)),
        },
    )
    return data_url
