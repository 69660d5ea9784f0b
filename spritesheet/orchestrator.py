from __future__ import annotations

import concurrent.futures
from typing import List, Optional, Sequence

from common.logging_setup import get_logger
from common.types import FetchedImage, ImageDescriptor
from spritesheet.fetcher import ImageFetcher


log = get_logger(__name__)


def fetch_all(
    descriptors: Sequence[ImageDescriptor],
    concurrency: int = 10,
    fetcher: Optional[ImageFetcher] = None,
) -> List[FetchedImage]:
    """
    Fetch every descriptor with at most `concurrency` fetches in flight.

    Returns results in input order once all of them have resolved. The
    fetcher never raises for upstream problems, so there are no partial
    results; anything it does raise is a bug and propagates.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")
    if not descriptors:
        return []

    fetcher = fetcher or ImageFetcher()
    max_workers = min(concurrency, len(descriptors))
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        # one future per input slot; reading them back in order keeps the association
        futures = [executor.submit(fetcher.fetch, d) for d in descriptors]
        out = [f.result() for f in futures]

    missing = sum(1 for img in out if img.missing)
    log.debug(
        "Fetched sprite images",
        extra={"extra": {"count": len(out), "missing": missing, "concurrency": max_workers}},
    )
    return out
