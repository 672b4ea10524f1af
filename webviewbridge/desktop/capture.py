"""Post-processing of captured window pixels with Pillow."""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass

from PIL import Image

MIN_QUALITY = 30
MIN_WIDTH = 320


@dataclass(slots=True)
class EncodedImage:
    data: bytes
    format: str
    width: int
    height: int

    @property
    def mime_type(self) -> str:
        return "image/png" if self.format == "png" else "image/jpeg"

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{base64.b64encode(self.data).decode('ascii')}"


def _resize_to_width(image: Image.Image, max_width: int) -> Image.Image:
    if image.width <= max_width:
        return image
    height = max(1, round(image.height * max_width / image.width))
    return image.resize((max_width, height), Image.LANCZOS)


def _encode(image: Image.Image, fmt: str, quality: int) -> bytes:
    buf = io.BytesIO()
    if fmt == "png":
        image.save(buf, format="PNG", optimize=True)
    else:
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        image.save(buf, format="JPEG", quality=quality, optimize=True)
    return buf.getvalue()


def encode_image(
    image: Image.Image,
    *,
    fmt: str = "jpeg",
    quality: int = 85,
    max_width: int = 1920,
    max_size_mb: float = 2.0,
) -> EncodedImage:
    """Resize to ``max_width`` and shrink until the encoded size fits ``max_size_mb``.

    JPEG lowers quality first, then width; PNG can only lower width.
    """
    fmt = fmt.lower()
    if fmt == "jpg":
        fmt = "jpeg"
    limit = int(max_size_mb * 1024 * 1024)
    current = _resize_to_width(image, max_width)
    data = _encode(current, fmt, quality)
    while len(data) > limit:
        if fmt == "jpeg" and quality > MIN_QUALITY:
            quality = max(MIN_QUALITY, quality - 10)
        elif current.width > MIN_WIDTH:
            current = _resize_to_width(current, max(MIN_WIDTH, int(current.width * 0.8)))
        else:
            break
        data = _encode(current, fmt, quality)
    return EncodedImage(data=data, format=fmt, width=current.width, height=current.height)
