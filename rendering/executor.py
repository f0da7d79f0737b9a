from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Tuple

import numpy as np

from rendering.core import RenderRequest, render_band

logger = logging.getLogger(__name__)


class CancelToken:
    def __init__(self) -> None:
        self._flag = threading.Event()

    def cancel(self) -> None:
        self._flag.set()

    def is_cancelled(self) -> bool:
        return self._flag.is_set()


def split_bands(height: int, parts: int) -> List[Tuple[int, int]]:
    """
    Splits rows [0, height) into up to `parts` contiguous bands.
    The last band takes the remainder rows.
    """
    parts = max(1, min(int(parts), int(height)))
    base = height // parts
    bands: List[Tuple[int, int]] = []
    off = 0
    for i in range(parts):
        h = base if i < parts - 1 else (height - base * (parts - 1))
        if h <= 0:
            break
        bands.append((off, off + h))
        off += h
    return bands


class BandExecutor:
    """
    Runs the row bands of a frame on a shared thread pool.
    The numba row kernels release the GIL, so bands compute in parallel.
    """

    def __init__(self, max_workers: Optional[int] = None) -> None:
        self.max_workers = max_workers or os.cpu_count() or 1
        self._pool = ThreadPoolExecutor(max_workers=self.max_workers,
                                        thread_name_prefix="render-band")

    def render(self, request: RenderRequest,
               token: Optional[CancelToken] = None) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        """
        Returns (iterations, rgb) for the full frame, or None when the token
        was cancelled before every band finished.
        """
        token = token or CancelToken()
        H, W = request.height, request.width
        bands = split_bands(H, request.workers)

        t0 = time.perf_counter()
        futs = [self._pool.submit(render_band, request, y0, y1, token) for y0, y1 in bands]

        iters = np.empty((H, W), dtype=np.int32)
        rgb = np.empty((H, W, 3), dtype=np.uint8)
        complete = True
        try:
            for fut in as_completed(futs):
                band = fut.result()
                if band is None:
                    complete = False
                    continue
                h = band.iterations.shape[0]
                iters[band.y0:band.y0 + h] = band.iterations
                rgb[band.y0:band.y0 + h] = band.data
        except Exception:
            token.cancel()
            raise

        if not complete or token.is_cancelled():
            return None

        elapsed = (time.perf_counter() - t0) * 1000.0
        logger.debug("Rendered %dx%d in %d bands in %.2f ms", W, H, len(bands), elapsed)
        return iters, rgb

    def close(self) -> None:
        self._pool.shutdown(wait=False, cancel_futures=True)
