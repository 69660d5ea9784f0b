from __future__ import annotations

from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from common.logging_setup import setup_logging
from spritesheet.config import DEFAULT_CONFIG_PATH, SpriteConfig, load_config, load_yaml
from spritesheet.fetcher import ImageFetcher
from spritesheet.handler import Resolver, SpriteRequestError, sprite_endpoint
from spritesheet.resolver import StaticSpriteResolver


def create_app(
    resolver: Optional[Resolver] = None,
    config: Optional[SpriteConfig] = None,
    fetcher: Optional[ImageFetcher] = None,
    config_path: str = DEFAULT_CONFIG_PATH,
) -> FastAPI:
    """
    Sprite API:
      GET /sprites/{name}[@Nx].json  -> manifest
      GET /sprites/{name}[@Nx].png   -> atlas
      GET /health
    Sprites come from `resolver`, or from `sprites.sheets` in the params file.
    """
    P = load_yaml(config_path)
    setup_logging((P.get("logging") or {}).get("level"))

    if config is None:
        config = load_config(config_path)
    if resolver is None:
        resolver = StaticSpriteResolver((P.get("sprites") or {}).get("sheets"))

    app = FastAPI(title="Sprite Sheet API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["ETag"],
    )

    @app.exception_handler(SpriteRequestError)
    async def _bad_sprite_path(request: Request, exc: SpriteRequestError):
        return JSONResponse({"error": "bad_sprite_path", "detail": str(exc)}, status_code=400)

    @app.get("/health")
    def health():
        names = resolver.names if isinstance(resolver, StaticSpriteResolver) else None
        return {
            "status": "ok",
            "sprites": names,
            "concurrency": config.concurrency,
            "missing_image_retry_interval": config.missing_image_retry_interval,
        }

    app.add_api_route(
        "/sprites/{name}",
        sprite_endpoint(resolver, config=config, fetcher=fetcher),
        methods=["GET"],
    )
    return app


# -------- local dev entrypoint --------
if __name__ == "__main__":
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
