"""
Iteration-count to color mapping.

Every scheme is a pure function of (iterations, max_iter), dispatched through
a fixed table, so band workers can call it concurrently. Points that never
escaped (iterations == max_iter) are always black.
"""
from typing import Callable, Dict, Optional, Sequence, Tuple

import numpy as np

from coloring.palettes import create_smooth_gradient
from utils.enums import ColorScheme

RGB = Tuple[int, int, int]

BLACK: RGB = (0, 0, 0)
INSIDE_BINARY: RGB = (255, 0, 0)
OUTSIDE_BINARY: RGB = (255, 255, 255)

RAINBOW_SATURATION = 0.8
RAINBOW_LIGHTNESS = 0.5


def _to_uint8(channel: np.ndarray) -> np.ndarray:
    return np.round(np.clip(channel, 0.0, 1.0) * 255.0).astype(np.uint8)


def hsl_to_rgb(hue: np.ndarray, saturation: float, lightness: float) -> np.ndarray:
    """Vectorised HSL -> RGB, hue in degrees, result channels in [0, 1]."""
    hue = np.asarray(hue, dtype=np.float64)
    a = saturation * min(lightness, 1.0 - lightness)

    def f(n):
        k = (n + hue / 30.0) % 12.0
        return lightness - a * np.maximum(-1.0, np.minimum(np.minimum(k - 3.0, 9.0 - k), 1.0))

    return np.stack([f(0.0), f(8.0), f(4.0)], axis=-1)


def _rainbow(iters: np.ndarray, max_iter: int, palette) -> np.ndarray:
    hue = (iters * 360.0 / max_iter) % 360.0
    return _to_uint8(hsl_to_rgb(hue, RAINBOW_SATURATION, RAINBOW_LIGHTNESS))


def _grayscale(iters: np.ndarray, max_iter: int, palette) -> np.ndarray:
    intensity = np.floor(iters * 255.0 / max_iter).astype(np.uint8)
    return np.repeat(intensity[..., None], 3, axis=-1)


def _fire(iters: np.ndarray, max_iter: int, palette) -> np.ndarray:
    ratio = iters / float(max_iter)
    rgb = np.stack([np.minimum(1.0, ratio * 2.0),
                    np.minimum(1.0, ratio * 1.5),
                    ratio], axis=-1)
    return _to_uint8(rgb)


def _custom(iters: np.ndarray, max_iter: int, palette) -> np.ndarray:
    if palette is None or len(palette) == 0:
        return _rainbow(iters, max_iter, None)
    palette = np.asarray(palette, dtype=np.float64)
    size = len(palette)
    idx_f = iters / float(max_iter) * (size - 1)
    idx = np.clip(idx_f.astype(np.int64), 0, size - 1)
    t = (idx_f - idx)[..., None]
    idx_next = np.clip(idx + 1, 0, size - 1)
    blended = (1.0 - t) * palette[idx] + t * palette[idx_next]
    return np.round(blended).astype(np.uint8)


_SCHEMES: Dict[ColorScheme, Callable] = {
    ColorScheme.RAINBOW: _rainbow,
    ColorScheme.GRAYSCALE: _grayscale,
    ColorScheme.FIRE: _fire,
    ColorScheme.CUSTOM: _custom,
}


def build_custom_palette(colors: Optional[Sequence[RGB]], resolution: int = 256):
    """Expands control colors into a smooth uint8 lookup table (None stays None)."""
    if not colors:
        return None
    return np.array(create_smooth_gradient(list(colors), resolution=resolution), dtype=np.uint8)


def colorize(iter_buf: np.ndarray, max_iter: int, scheme: ColorScheme = ColorScheme.RAINBOW,
             palette: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Maps an iteration buffer of any shape to uint8 RGB with a trailing
    channel axis. Schemes without a mapping (ICE, unknown values) use RAINBOW.
    """
    iters = np.asarray(iter_buf)
    mapper = _SCHEMES.get(scheme, _rainbow)
    rgb = mapper(iters.astype(np.float64), max_iter, palette)
    rgb[iters >= max_iter] = BLACK
    return rgb


def colorize_binary(iter_buf: np.ndarray, max_iter: int) -> np.ndarray:
    iters = np.asarray(iter_buf)
    rgb = np.empty(iters.shape + (3,), dtype=np.uint8)
    rgb[...] = OUTSIDE_BINARY
    rgb[iters >= max_iter] = INSIDE_BINARY
    return rgb


def get_color(iterations: int, max_iter: int, scheme: ColorScheme = ColorScheme.RAINBOW,
              palette: Optional[np.ndarray] = None) -> RGB:
    rgb = colorize(np.array([iterations]), max_iter, scheme, palette)[0]
    return tuple(int(c) for c in rgb)
