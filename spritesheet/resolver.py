from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional

from fastapi import Request

from common.types import ImageDescriptor


_NAME_SUFFIX_RE = re.compile(r"(?:@[0-9]+x)?\.[A-Za-z0-9]+$")


def sprite_name(path: str) -> str:
    """'/sprites/icons@2x.png' -> 'icons'"""
    segment = path.rstrip("/").rsplit("/", 1)[-1]
    return _NAME_SUFFIX_RE.sub("", segment)


class StaticSpriteResolver:
    """
    Resolves sprite names to image lists declared up front, e.g. the
    `sprites.sheets` section of config/params.yaml:

        sheets:
          icons:
            - {id: home, url: https://cdn.example/home.svg, width: 24, height: 24}
    """

    def __init__(self, sheets: Optional[Mapping[str, List[Mapping[str, Any]]]] = None):
        self._sheets: Dict[str, List[ImageDescriptor]] = {
            str(name): [ImageDescriptor.from_dict(d) for d in (images or [])]
            for name, images in (sheets or {}).items()
        }

    @property
    def names(self) -> List[str]:
        return sorted(self._sheets)

    def resolve(self, name: str) -> Optional[List[ImageDescriptor]]:
        images = self._sheets.get(name)
        return list(images) if images is not None else None

    def __call__(self, request: Request) -> Optional[List[ImageDescriptor]]:
        return self.resolve(sprite_name(request.url.path))
