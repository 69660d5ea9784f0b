from __future__ import annotations

"""
Image codec helpers: everything that touches pixels lives here.

- Raster sources are decoded with Pillow and cover-fitted to the target size.
- SVG sources are rasterized with CairoSVG at a density derived from the
  requested size, then fitted the same way.
- Atlases are composited source-over onto a transparent RGBA canvas.

All functions take and return encoded bytes so callers never hold Pillow
objects across threads.
"""

import io
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple
from urllib.parse import urlparse

from PIL import Image, ImageOps


DEFAULT_DENSITY = 72.0

# CSS absolute units -> px
_UNIT_PX = {
    "": 1.0,
    "px": 1.0,
    "pt": 96.0 / 72.0,
    "pc": 16.0,
    "in": 96.0,
    "cm": 96.0 / 2.54,
    "mm": 96.0 / 25.4,
}
_LENGTH_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?)\s*([a-z]*)\s*$")


@dataclass(frozen=True)
class SvgMetadata:
    width: float
    height: float
    density: float = DEFAULT_DENSITY


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def _empty_png() -> bytes:
    return encode_png(Image.new("RGBA", (1, 1), (0, 0, 0, 0)))


# Canonical transparent placeholder, built once and never mutated.
EMPTY_PNG: bytes = _empty_png()


def is_svg(url: Optional[str], content_type: Optional[str] = None) -> bool:
    """SVG if the URL path ends in .svg or the server says image/svg+xml."""
    if content_type and content_type.split(";")[0].strip().lower() == "image/svg+xml":
        return True
    if not url:
        return False
    return urlparse(url).path.lower().endswith(".svg")


def _parse_length(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    m = _LENGTH_RE.match(value)
    if not m or m.group(2) not in _UNIT_PX:
        return None  # %, em, ... depend on a viewport we don't have
    return float(m.group(1)) * _UNIT_PX[m.group(2)]


def svg_metadata(data: bytes) -> SvgMetadata:
    """
    Intrinsic size of an SVG document from its root width/height, falling
    back to the viewBox. Raises ValueError if neither gives a usable size.
    """
    root = ET.fromstring(data)
    if not root.tag.endswith("svg"):
        raise ValueError(f"Not an SVG document (root <{root.tag}>)")

    width = _parse_length(root.get("width"))
    height = _parse_length(root.get("height"))

    view_box = root.get("viewBox")
    if view_box and (width is None or height is None):
        parts = [float(p) for p in view_box.replace(",", " ").split()]
        if len(parts) == 4:
            vb_w, vb_h = parts[2], parts[3]
            if width is None and height is None:
                width, height = vb_w, vb_h
            elif width is None and vb_h > 0:
                width = height * vb_w / vb_h
            elif height is None and vb_w > 0:
                height = width * vb_h / vb_w

    if not width or not height or width <= 0 or height <= 0:
        raise ValueError("SVG has no intrinsic size")
    return SvgMetadata(width=width, height=height)


def vector_density(meta: SvgMetadata, requested_width: int) -> float:
    """
    Render density for an SVG requested at `requested_width`. Upscaling raises
    the density by the same ratio so the raster stays sharp.
    """
    ratio = requested_width / meta.width
    if ratio > 1:
        return meta.density * ratio
    return meta.density


def resize_to_png(data: bytes, width: int, height: int) -> bytes:
    """Decode a raster image and cover-fit it to exactly width x height."""
    with Image.open(io.BytesIO(data)) as img:
        img = img.convert("RGBA")
        if img.size != (width, height):
            img = ImageOps.fit(img, (width, height), method=Image.Resampling.LANCZOS)
        return encode_png(img)


def rasterize_svg(data: bytes, width: int, height: int, density: float) -> bytes:
    """Render an SVG at `density` and fit it to exactly width x height."""
    # cairosvg needs the native cairo library; import on first SVG only
    import cairosvg  # type: ignore

    png = cairosvg.svg2png(bytestring=data, scale=density / DEFAULT_DENSITY)
    return resize_to_png(png, width, height)


def composite_png(width: int, height: int, layers: Iterable[Tuple[bytes, int, int]]) -> bytes:
    """
    Source-over composite of PNG `layers` (buffer, left, top) onto a fully
    transparent width x height canvas. Layers are clipped to the canvas.
    """
    canvas = Image.new("RGBA", (int(width), int(height)), (0, 0, 0, 0))
    for buf, left, top in layers:
        with Image.open(io.BytesIO(buf)) as layer:
            layer = layer.convert("RGBA")
            canvas.alpha_composite(layer, dest=(int(left), int(top)))
    return encode_png(canvas)
