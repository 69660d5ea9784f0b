from __future__ import annotations

"""
HTTP handler serving a sprite as JSON manifest or PNG atlas.

Request path grammar (last segment):  <name>[@<N>x].(json|png)

Flow per request:
  resolver -> 404 if None
  parse suffix -> SpriteRequestError if malformed
  pack -> ETag over manifest JSON -> 304 if the client is fresh (no image I/O)
  .json -> manifest
  .png  -> fetch + composite; placeholders switch the ETag to the PNG bytes
           and add a short Cache-Control so clients retry soon
"""

import inspect
import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from fastapi import Request
from fastapi.responses import Response

from common.logging_setup import get_logger
from common.types import ImageDescriptor
from common.utils import generate_etag, is_fresh, qs_toggle
from spritesheet.compositor import render_atlas
from spritesheet.config import SpriteConfig
from spritesheet.fetcher import ImageFetcher
from spritesheet.manifest import build_manifest, manifest_json


log = get_logger(__name__)

_SUFFIX_RE = re.compile(r"(?:@([0-9]+)x)?\.(png|json)$")

Resolver = Callable[[Request], Optional[Sequence[Union[ImageDescriptor, Mapping[str, Any]]]]]


class SpriteRequestError(ValueError):
    """The request path does not end in a recognizable sprite suffix."""


@dataclass(frozen=True)
class SpriteRequest:
    pixel_ratio: int
    format: str  # "json" | "png"


def parse_sprite_path(path: str) -> SpriteRequest:
    m = _SUFFIX_RE.search(path)
    ratio = int(m.group(1)) if m and m.group(1) else 1
    if not m or ratio < 1:
        raise SpriteRequestError(
            f"Expected URL to have suffix of format (@<N>x)?.(png|json), got '{path}'"
        )
    return SpriteRequest(pixel_ratio=ratio, format=m.group(2))


def _as_descriptors(images: Sequence[Union[ImageDescriptor, Mapping[str, Any]]]):
    return [d if isinstance(d, ImageDescriptor) else ImageDescriptor.from_dict(d) for d in images]


def sprite_endpoint(
    resolver: Resolver,
    config: Optional[Union[SpriteConfig, Mapping[str, Any]]] = None,
    fetcher: Optional[ImageFetcher] = None,
) -> Callable[[Request], Response]:
    """
    Build a FastAPI endpoint for sprites resolved by `resolver`.

    Params:
        resolver: request -> image descriptors (or dicts), None for "no such sprite".
            Called from FastAPI's worker threadpool, so it must be a plain
            function; coroutine functions are rejected with TypeError.
        config: SpriteConfig or a plain options mapping (defaults otherwise)
        fetcher: optional ImageFetcher; if omitted one is built from `config`
            and shared by every request this endpoint serves

    Mount it with:
        app.add_api_route("/sprites/{name}", sprite_endpoint(resolver), methods=["GET"])
    """
    if not isinstance(config, SpriteConfig):
        config = SpriteConfig.from_mapping(config)
    if fetcher is None:
        fetcher = ImageFetcher.from_config(config)

    def endpoint(request: Request) -> Response:
        images = resolver(request)
        if inspect.isawaitable(images):
            if inspect.iscoroutine(images):
                images.close()
            raise TypeError(
                f"Sprite resolver {resolver!r} returned an awaitable; resolvers must be synchronous"
            )
        if images is None:
            return Response(status_code=404)

        req = parse_sprite_path(request.url.path)
        pretty = qs_toggle(request.query_params, "debug")

        manifest = build_manifest(_as_descriptors(images), req.pixel_ratio)
        body = manifest_json(manifest, pretty=pretty)

        # Cheap: no image has been fetched yet
        etag = generate_etag(body)
        headers = {"ETag": etag}
        if is_fresh(request.headers, etag):
            return Response(status_code=304, headers=headers)

        if req.format == "json":
            return Response(content=body, media_type="application/json", headers=headers)

        atlas = render_atlas(manifest, config=config, fetcher=fetcher)
        if atlas.has_missing_images:
            headers["ETag"] = generate_etag(atlas.buffer)
            headers["Cache-Control"] = f"public, max-age={config.missing_image_retry_interval}"
            log.info(
                "Serving degraded sprite",
                extra={"extra": {"path": request.url.path, "retry_s": config.missing_image_retry_interval}},
            )
        return Response(content=atlas.buffer, media_type="image/png", headers=headers)

    return endpoint
