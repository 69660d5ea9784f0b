from __future__ import annotations

from typing import Dict, Optional, Sequence

from common.types import AtlasResult, FetchedImage, ImageDescriptor, SpriteManifest
from spritesheet.config import SpriteConfig
from spritesheet.fetcher import ImageFetcher
from spritesheet.imaging import EMPTY_PNG, composite_png
from spritesheet.manifest import build_manifest
from spritesheet.orchestrator import fetch_all


def composite(manifest: SpriteManifest, images: Sequence[FetchedImage]) -> AtlasResult:
    """
    Draw every fetched image onto a transparent canvas of the manifest's size.

    Each buffer goes at its box's native packer (x, y); the pixel ratio only
    affects the exposed manifest geometry.
    """
    has_missing = any(img.missing for img in images)
    if not images:
        return AtlasResult(buffer=EMPTY_PNG, has_missing_images=has_missing)

    layers = []
    for img in images:
        box = manifest.packed.get(img.id)
        if box is None:
            raise KeyError(f"No packed box for image '{img.id}'")
        layers.append((img.buffer, box.x, box.y))

    buffer = composite_png(manifest.width, manifest.height, layers)
    return AtlasResult(buffer=buffer, has_missing_images=has_missing)


def render_atlas(
    manifest: SpriteManifest,
    config: Optional[SpriteConfig] = None,
    fetcher: Optional[ImageFetcher] = None,
) -> AtlasResult:
    """Fetch the manifest's images and composite them into one PNG."""
    config = config or SpriteConfig()
    if fetcher is None:
        # one-off fetcher: its session is closed once the images are in
        with ImageFetcher.from_config(config) as own:
            images = fetch_all(manifest.images, concurrency=config.concurrency, fetcher=own)
    else:
        images = fetch_all(manifest.images, concurrency=config.concurrency, fetcher=fetcher)
    return composite(manifest, images)


def convert(
    descriptors: Sequence[ImageDescriptor],
    pixel_ratio: int = 1,
    config: Optional[SpriteConfig] = None,
    fetcher: Optional[ImageFetcher] = None,
) -> Dict:
    """
    One-shot manifest + atlas for callers outside HTTP:
        {"json": boxes, "has_missing_images": bool, "buffer": PNG bytes}
    """
    manifest = build_manifest(descriptors, pixel_ratio)
    atlas = render_atlas(manifest, config=config, fetcher=fetcher)
    return {
        "json": manifest.boxes,
        "has_missing_images": atlas.has_missing_images,
        "buffer": atlas.buffer,
    }
