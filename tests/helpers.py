"""
Shared fixtures for tests: in-memory PNGs and fake HTTP responses.
"""

import io
import threading
import time
from unittest.mock import Mock

from PIL import Image


def make_png(width, height, color=(255, 0, 0, 255)):
    """Solid RGBA PNG as bytes."""
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def open_png(data):
    img = Image.open(io.BytesIO(data))
    img.load()
    return img.convert("RGBA")


def fake_response(status_code=200, content=b"", content_type="image/png"):
    resp = Mock()
    resp.status_code = status_code
    resp.content = content
    resp.headers = {"Content-Type": content_type}
    return resp


def fake_session(routes):
    """
    Mock requests.Session whose get() answers from `routes` (url -> response).
    Unknown URLs get a 404.
    """
    session = Mock()

    def _get(url, **kwargs):
        return routes.get(url) or fake_response(404, b"not found", "text/plain")

    session.get.side_effect = _get
    return session


class CountingFetcher:
    """Fetcher stub that records how many fetches overlap."""

    def __init__(self, delay=0.02, result=None):
        self.delay = delay
        self.result = result
        self.calls = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def fetch(self, descriptor):
        with self._lock:
            self.calls += 1
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            time.sleep(self.delay)
            return self.result(descriptor) if self.result else descriptor
        finally:
            with self._lock:
                self.in_flight -= 1
