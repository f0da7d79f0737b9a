from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class PixelResult:
    x: int
    y: int
    color: Tuple[int, int, int]


@dataclass(frozen=True)
class BandResult:
    y0: int
    iterations: np.ndarray    # (rows, W) int32
    data: np.ndarray          # (rows, W, 3) uint8


@dataclass(frozen=True)
class FrameEvent:
    data: np.ndarray          # (H, W, 3) uint8
    iterations: np.ndarray    # (H, W) int32
    width: int
    height: int
    seq: int                  # generation / render sequence number
    max_iter: int

    def pixels(self) -> Iterator[PixelResult]:
        """Yields the frame as per-pixel draw commands in row-major order."""
        for y in range(self.height):
            row = self.data[y]
            for x in range(self.width):
                r, g, b = row[x]
                yield PixelResult(x, y, (int(r), int(g), int(b)))


@dataclass(frozen=True)
class LogEvent:
    message: str
    level: Optional[str]
