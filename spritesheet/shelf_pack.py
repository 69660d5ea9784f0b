from __future__ import annotations

"""
Shelf bin-packing for sprite layouts.

Rectangles are placed left-to-right on horizontal shelves. A new item goes on
the shelf where it wastes the least height; when nothing fits a new shelf is
opened below the last one, and with `auto_resize` the canvas doubles until it
does. The layout depends only on the input order and sizes.

Usage:
    sprite = ShelfPack(1, 1, auto_resize=True)
    boxes = sprite.pack([{"id": "a", "width": 16, "height": 16}])
    sprite.shrink()
    sprite.w, sprite.h  # enclosing canvas
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from common.types import PackedBox


@dataclass
class Shelf:
    y: int
    w: int
    h: int
    x: int = 0

    @property
    def free(self) -> int:
        return self.w - self.x

    def alloc(self, w: int, h: int, id: str) -> Optional[PackedBox]:
        if w > self.free or h > self.h:
            return None
        x = self.x
        self.x += w
        return PackedBox(id=id, x=x, y=self.y, w=w, h=h)


class ShelfPack:
    def __init__(self, w: int = 0, h: int = 0, *, auto_resize: bool = False):
        self.w = int(w)
        self.h = int(h)
        self.auto_resize = auto_resize
        self.shelves: List[Shelf] = []
        self.bins: Dict[str, PackedBox] = {}

    # -------- public API --------

    def pack(self, items: Iterable[Mapping[str, Any]]) -> List[PackedBox]:
        """
        Pack `{"id", "width", "height"}` items in order. Items that cannot be
        placed (fixed-size canvas full) are left out of the result.
        """
        out: List[PackedBox] = []
        for item in items:
            w = int(item.get("w") or item.get("width") or 0)
            h = int(item.get("h") or item.get("height") or 0)
            if w <= 0 or h <= 0:
                continue
            box = self.pack_one(w, h, str(item["id"]))
            if box is not None:
                out.append(box)
        return out

    def pack_one(self, w: int, h: int, id: str) -> Optional[PackedBox]:
        if id in self.bins:
            return self.bins[id]

        best_shelf = -1
        best_waste = None
        y = 0
        for i, shelf in enumerate(self.shelves):
            y += shelf.h
            if w > shelf.free:
                continue
            if h == shelf.h:
                return self._alloc_shelf(i, w, h, id)
            if h > shelf.h:
                continue
            waste = (shelf.h - h) * w
            if best_waste is None or waste < best_waste:
                best_waste = waste
                best_shelf = i

        if best_shelf != -1:
            return self._alloc_shelf(best_shelf, w, h, id)

        if h <= self.h - y and w <= self.w:
            self.shelves.append(Shelf(y=y, w=self.w, h=h))
            return self._alloc_shelf(len(self.shelves) - 1, w, h, id)

        if self.auto_resize:
            w2 = h2 = None
            if self.w <= self.h or w > self.w:
                w2 = max(w, self.w) * 2
            if self.h < self.w or h > self.h:
                h2 = max(h, self.h) * 2
            self.resize(w2 or self.w, h2 or self.h)
            return self.pack_one(w, h, id)

        return None

    def resize(self, w: int, h: int) -> None:
        self.w = int(w)
        self.h = int(h)
        for shelf in self.shelves:
            shelf.w = self.w

    def shrink(self) -> None:
        """Shrink the canvas to the smallest size enclosing every shelf."""
        h2 = sum(s.h for s in self.shelves)
        w2 = max((s.x for s in self.shelves), default=0)
        self.resize(w2, h2)

    def clear(self) -> None:
        self.shelves = []
        self.bins = {}

    # -------- internals --------

    def _alloc_shelf(self, index: int, w: int, h: int, id: str) -> Optional[PackedBox]:
        box = self.shelves[index].alloc(w, h, id)
        if box is not None:
            self.bins[id] = box
        return box
