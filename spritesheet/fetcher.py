from __future__ import annotations

"""
Image fetcher: one descriptor in, one PNG-normalized FetchedImage out.

Failures never raise. A non-2xx status, a transport error or an undecodable
body all produce a placeholder (`missing=True`, buffer = EMPTY_PNG) so one
broken upstream image cannot fail a whole sprite.

Usage:
    fetcher = ImageFetcher(timeout=10.0)
    img = fetcher.fetch(ImageDescriptor(id="a", url="https://x/a.png", width=16, height=16))
    img.buffer   # 16x16 PNG
    img.missing  # True if a placeholder was substituted
"""

from typing import Optional

import requests

from common.logging_setup import get_logger
from common.types import FetchedImage, ImageDescriptor
from spritesheet.config import SpriteConfig
from spritesheet.imaging import (
    EMPTY_PNG,
    is_svg,
    rasterize_svg,
    resize_to_png,
    svg_metadata,
    vector_density,
)


log = get_logger(__name__)


def placeholder(descriptor: ImageDescriptor) -> FetchedImage:
    return FetchedImage(descriptor=descriptor, buffer=EMPTY_PNG, missing=True)


class ImageFetcher:
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
        user_agent: Optional[str] = None,
    ):
        """
        Params:
            session: optional requests.Session for connection reuse
            timeout: per-request connect/read timeout in seconds
            user_agent: optional User-Agent header for image sources
        """
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.timeout = timeout
        self.headers = {"User-Agent": user_agent} if user_agent else {}

    @classmethod
    def from_config(cls, config: SpriteConfig) -> "ImageFetcher":
        return cls(timeout=config.fetch_timeout, user_agent=config.user_agent)

    def close(self) -> None:
        """Close the session if this fetcher created it; injected sessions are left open."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "ImageFetcher":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def fetch(self, descriptor: ImageDescriptor) -> FetchedImage:
        if descriptor.buffer is not None:
            # already resolved by the resolver
            return FetchedImage(descriptor=descriptor, buffer=bytes(descriptor.buffer))

        try:
            r = self.session.get(descriptor.url, timeout=self.timeout, headers=self.headers)
            if r.status_code < 200 or r.status_code >= 300:
                log.warning(
                    "Not found: '%s'",
                    descriptor.url,
                    extra={"extra": {"id": descriptor.id, "status": r.status_code}},
                )
                return placeholder(descriptor)

            content_type = r.headers.get("Content-Type")
            if is_svg(descriptor.url, content_type):
                buffer = self._normalize_svg(r.content, descriptor)
            else:
                buffer = resize_to_png(r.content, descriptor.width, descriptor.height)
            return FetchedImage(descriptor=descriptor, buffer=buffer)
        except Exception as e:
            log.warning(
                "Failed to load image '%s': %s",
                descriptor.url,
                e,
                exc_info=True,
                extra={"extra": {"id": descriptor.id}},
            )
            return placeholder(descriptor)

    @staticmethod
    def _normalize_svg(data: bytes, descriptor: ImageDescriptor) -> bytes:
        meta = svg_metadata(data)
        density = vector_density(meta, descriptor.width)
        return rasterize_svg(data, descriptor.width, descriptor.height, density)
