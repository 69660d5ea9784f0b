from __future__ import annotations

import json
import logging
import os
import sys
import time
from typing import Optional, Union


_HANDLER_NAME = "spritesheet-json"


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line:
      {"t": 1729339200000, "lvl": "WARNING", "name": "spritesheet.fetcher",
       "msg": "Not found: 'http://x/a.png'", "extra": {"id": "a", "status": 500}}
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "t": int(time.time() * 1000),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        # log.warning(..., extra={"extra": {...}})
        context = getattr(record, "extra", None)
        if isinstance(context, dict):
            payload["extra"] = context
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def resolve_level(level: Union[str, int, None]) -> int:
    """'debug' / 'WARNING' / 10 -> logging level number; unknown names -> INFO."""
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    lvl = getattr(logging, str(level or "INFO").upper(), None)
    return lvl if isinstance(lvl, int) else logging.INFO


def _installed_handler(root: logging.Logger) -> Optional[logging.Handler]:
    for h in root.handlers:
        if h.get_name() == _HANDLER_NAME:
            return h
    return None


def setup_logging(level: Union[str, int, None] = None) -> None:
    """
    Install the JSON stdout handler on the root logger (once) and set the level.

    An explicit `level` always wins, also on later calls, so the app can apply
    its configured level after modules have already grabbed their loggers.
    Without one, the first call uses env LOG_LEVEL (default INFO) and later
    calls leave the level alone.
    """
    root = logging.getLogger()
    if _installed_handler(root) is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(JsonFormatter())
        root.handlers.clear()
        root.addHandler(handler)
        root.setLevel(resolve_level(level or os.environ.get("LOG_LEVEL")))
    elif level is not None:
        root.setLevel(resolve_level(level))


def get_logger(name: str) -> logging.Logger:
    """Module logger; installs the JSON handler on first use."""
    setup_logging()
    return logging.getLogger(name)
