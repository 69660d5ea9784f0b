"""
Sprite sheets over HTTP

Packs a set of named images (URLs or inline bytes) into one atlas and serves:
- <name>[@Nx].json: id -> {pixelRatio, width, height, x, y}
- <name>[@Nx].png: the composited atlas

Images are fetched with a bounded thread pool; any image that cannot be
fetched or decoded becomes a transparent placeholder and the PNG is served
with a short max-age so clients retry.

Entry point:
    python -m spritesheet.server
"""
from .compositor import composite, convert, render_atlas
from .fetcher import ImageFetcher
from .handler import SpriteRequestError, parse_sprite_path, sprite_endpoint
from .manifest import build_manifest
from .orchestrator import fetch_all

__all__ = [
    "ImageFetcher",
    "SpriteRequestError",
    "build_manifest",
    "composite",
    "convert",
    "fetch_all",
    "parse_sprite_path",
    "render_atlas",
    "sprite_endpoint",
]
