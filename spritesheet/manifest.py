from __future__ import annotations

import json
from typing import Iterable, Sequence

from common.types import ImageDescriptor, SpriteManifest
from spritesheet.shelf_pack import ShelfPack


def build_manifest(descriptors: Sequence[ImageDescriptor], pixel_ratio: int = 1) -> SpriteManifest:
    """
    Pack `descriptors` and describe the layout at `pixel_ratio`.

    Packing happens once in native pixels; `boxes` and the canvas size are
    that layout multiplied by `pixel_ratio`, so @2x manifests are exactly
    double the @1x ones.
    """
    if isinstance(pixel_ratio, bool) or not isinstance(pixel_ratio, int) or pixel_ratio < 1:
        raise ValueError(f"pixel_ratio must be an int >= 1 (got {pixel_ratio!r})")
    images = tuple(descriptors)
    _check_unique_ids(images)

    sprite = ShelfPack(1, 1, auto_resize=True)
    packed = sprite.pack({"id": d.id, "width": d.width, "height": d.height} for d in images)
    sprite.shrink()

    return SpriteManifest(
        width=sprite.w * pixel_ratio,
        height=sprite.h * pixel_ratio,
        pixel_ratio=pixel_ratio,
        images=images,
        boxes={box.id: box.scaled(pixel_ratio) for box in packed},
        packed={box.id: box for box in packed},
    )


def manifest_json(manifest: SpriteManifest, pretty: bool = False) -> str:
    """Serialized `boxes` mapping; compact unless `pretty`."""
    if pretty:
        return json.dumps(manifest.boxes, indent=2)
    return json.dumps(manifest.boxes, separators=(",", ":"))


def _check_unique_ids(images: Iterable[ImageDescriptor]) -> None:
    seen = set()
    for d in images:
        if d.id in seen:
            raise ValueError(f"Duplicate image id '{d.id}'")
        seen.add(d.id)
