from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml


DEFAULT_CONFIG_PATH = "config/params.yaml"


@dataclass(frozen=True)
class SpriteConfig:
    """
    Options for the sprite pipeline, resolved once when a handler is built.

    Attributes:
        concurrency: max simultaneous upstream image fetches.
        missing_image_retry_interval: Cache-Control max-age (s) for sprites
            that contain placeholders.
        fetch_timeout: per-fetch connect/read timeout (s).
        user_agent: User-Agent sent to image sources.
    """
    concurrency: int = 10
    missing_image_retry_interval: int = 60
    fetch_timeout: float = 10.0
    user_agent: str = "spritesheet/1.0"

    def __post_init__(self) -> None:
        if isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int) or self.concurrency < 1:
            raise ValueError("concurrency must be an int >= 1")
        if (
            isinstance(self.missing_image_retry_interval, bool)
            or not isinstance(self.missing_image_retry_interval, int)
            or self.missing_image_retry_interval < 0
        ):
            raise ValueError("missing_image_retry_interval must be an int >= 0")
        if not isinstance(self.fetch_timeout, (int, float)) or self.fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be > 0")

    @classmethod
    def from_mapping(cls, opts: Optional[Mapping[str, Any]] = None) -> "SpriteConfig":
        """Defaults overlaid by `opts`; unknown keys are an error."""
        opts = dict(opts or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(opts) - known)
        if unknown:
            raise ValueError(f"Unknown sprite options: {', '.join(unknown)}")
        return replace(cls(), **opts)


def load_yaml(path: str = DEFAULT_CONFIG_PATH) -> Dict:
    """Raw YAML document, or {} when the file does not exist."""
    if not Path(path).exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(path: str = DEFAULT_CONFIG_PATH) -> SpriteConfig:
    """
    Read the `sprites:` section of the params file into a SpriteConfig.
    Sprite sheet definitions (`sprites.sheets`) are not pipeline options and
    are ignored here; see spritesheet.resolver.
    """
    section = dict(load_yaml(path).get("sprites") or {})
    section.pop("sheets", None)
    return SpriteConfig.from_mapping(section)
