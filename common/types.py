from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple


BoxDict = Dict[str, int]


def _as_int(value: Any, name: str) -> int:
    """16, 16.0 and "16" are fine; 16.7, "16.7" and booleans are not."""
    if isinstance(value, bool):
        raise TypeError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{name} must be a whole number, got {value!r}")
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValueError(f"{name} must be a whole number, got {value!r}") from None


@dataclass(frozen=True, slots=True)
class ImageDescriptor:
    """
    One image requested for a sprite, as produced by a resolver.

    Attributes:
        id: unique key within a sprite; becomes the manifest key.
        width, height: target size in pixels (native, unscaled).
        url: where to GET the image from (raster or SVG).
        buffer: already-resolved image bytes; when present no fetch happens.
    """
    id: str
    width: int
    height: int
    url: Optional[str] = None
    buffer: Optional[bytes] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise ValueError("id must be a non-empty string")
        for name in ("width", "height"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int):
                raise TypeError(f"{name} must be an int")
            if v <= 0:
                raise ValueError(f"{name} must be > 0 (got {v} for '{self.id}')")
        if self.buffer is None and not self.url:
            raise ValueError(f"image '{self.id}' needs a url or a buffer")
        if self.buffer is not None and not isinstance(self.buffer, (bytes, bytearray)):
            raise TypeError("buffer must be bytes")

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ImageDescriptor":
        """Build from a plain mapping (YAML sprite definitions, resolver dicts)."""
        return cls(
            id=str(d["id"]),
            width=_as_int(d["width"], "width"),
            height=_as_int(d["height"], "height"),
            url=d.get("url"),
            buffer=d.get("buffer"),
        )

    def to_meta(self) -> Dict[str, Any]:
        """Metadata without image bytes (safe to log/serialize)."""
        return {
            "id": self.id,
            "url": self.url,
            "width": self.width,
            "height": self.height,
            "inline": self.buffer is not None,
        }


@dataclass(frozen=True, slots=True)
class PackedBox:
    """Rectangle assigned by the packer, in native (unscaled) pixels."""
    id: str
    x: int
    y: int
    w: int
    h: int

    def scaled(self, pixel_ratio: int) -> BoxDict:
        """Public manifest entry for this box at `pixel_ratio`."""
        return {
            "pixelRatio": pixel_ratio,
            "width": self.w * pixel_ratio,
            "height": self.h * pixel_ratio,
            "x": self.x * pixel_ratio,
            "y": self.y * pixel_ratio,
        }

    def overlaps(self, other: "PackedBox") -> bool:
        return not (
            self.x + self.w <= other.x
            or other.x + other.w <= self.x
            or self.y + self.h <= other.y
            or other.y + other.h <= self.y
        )


@dataclass(frozen=True, slots=True)
class SpriteManifest:
    """
    Packed layout of one sprite.

    `width`/`height` and `boxes` are scaled by `pixel_ratio`; `packed` keeps
    the packer's native coordinates, which is where pixels are composited.
    """
    width: int
    height: int
    pixel_ratio: int
    images: Tuple[ImageDescriptor, ...]
    boxes: Dict[str, BoxDict] = field(repr=False)
    packed: Dict[str, PackedBox] = field(repr=False)


@dataclass(frozen=True, slots=True)
class FetchedImage:
    """
    A descriptor after fetching. `missing=True` marks a placeholder buffer.
    """
    descriptor: ImageDescriptor
    buffer: bytes = field(repr=False)
    missing: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.buffer, (bytes, bytearray)):
            raise TypeError("buffer must be bytes")

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def url(self) -> Optional[str]:
        return self.descriptor.url

    @property
    def width(self) -> int:
        return self.descriptor.width

    @property
    def height(self) -> int:
        return self.descriptor.height


@dataclass(frozen=True, slots=True)
class AtlasResult:
    buffer: bytes = field(repr=False)
    has_missing_images: bool = False
