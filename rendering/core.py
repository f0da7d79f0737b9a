from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from coloring.schemes import build_custom_palette, colorize, colorize_binary
from fractals.base import DEFAULT_JULIA_CONSTANT, FractalSettings
from fractals.complex_value import Complex
from fractals.escape import max_iterations_for
from kernel_sources import load_kernel
from rendering.events import BandResult
from utils.coords import CoordinateConverter
from utils.enums import ColorScheme, FractalKind


@dataclass(frozen=True)
class RenderRequest:
    """
    Everything a render job needs, captured once at dispatch time.
    The converter holds a copy of the viewport bounds and size, so later
    navigation never leaks into a frame that is already being computed.
    """
    converter: CoordinateConverter
    max_iter: int
    fractal: FractalKind = FractalKind.MANDELBROT
    color_scheme: ColorScheme = ColorScheme.RAINBOW
    julia_constant: Complex = DEFAULT_JULIA_CONSTANT
    workers: int = 1
    preview: bool = False
    palette: Optional[np.ndarray] = field(default=None, compare=False, repr=False)

    @property
    def width(self) -> int:
        return self.converter.width

    @property
    def height(self) -> int:
        return self.converter.height

    @classmethod
    def build(cls, viewport, settings: FractalSettings, preview: bool = False) -> "RenderRequest":
        converter = CoordinateConverter.from_viewport(viewport)
        max_iter = max_iterations_for(converter.min_x, converter.max_x, settings)
        if preview:
            workers = 1
        else:
            workers = settings.workers or os.cpu_count() or 1
        palette = None
        if settings.color_scheme == ColorScheme.CUSTOM:
            palette = build_custom_palette(settings.custom_palette)
        return cls(converter=converter,
                   max_iter=max_iter,
                   fractal=settings.fractal,
                   color_scheme=settings.color_scheme,
                   julia_constant=settings.julia_constant,
                   workers=max(1, int(workers)),
                   preview=preview,
                   palette=palette)


def render_band(request: RenderRequest, y0: int, y1: int, token=None) -> Optional[BandResult]:
    """
    Computes rows [y0, y1) of the frame. Returns None as soon as the token
    reports cancellation; the check runs before every row.
    """
    kernel = load_kernel(request.fractal.name.lower())["func"]
    conv = request.converter
    xs = conv.screen_to_plane_x(np.arange(conv.width, dtype=np.float64))
    iters = np.empty((y1 - y0, conv.width), dtype=np.int32)
    k = request.julia_constant

    for row, y in enumerate(range(y0, y1)):
        if token is not None and token.is_cancelled():
            return None
        ci = float(conv.screen_to_plane_y(float(y)))
        kernel(xs, ci, k.re, k.im, request.max_iter, iters[row])

    if request.preview:
        data = colorize_binary(iters, request.max_iter)
    else:
        data = colorize(iters, request.max_iter, request.color_scheme, request.palette)
    return BandResult(y0=y0, iterations=iters, data=data)
