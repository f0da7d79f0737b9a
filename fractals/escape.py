"""
Scalar escape-time functions and the iteration bound policy.

Both fractal functions share the signature (c, max_iter) -> iterations, with
the Julia constant bound in through escape_function(). A result equal to
max_iter means the orbit never escaped (the point is treated as inside).
"""
import math
from functools import partial
from typing import Callable

from fractals.base import DEFAULT_JULIA_CONSTANT, FractalSettings
from fractals.complex_value import Complex
from utils.enums import FractalKind

ESCAPE_RADIUS_SQ = 4.0

EscapeFunction = Callable[[Complex, int], int]


def mandelbrot(c: Complex, max_iter: int) -> int:
    z = Complex()
    n = 0
    while n < max_iter and z.abs2 < ESCAPE_RADIUS_SQ:
        z = z * z + c
        n += 1
    return n


def julia(z: Complex, max_iter: int, k: Complex = DEFAULT_JULIA_CONSTANT) -> int:
    n = 0
    while n < max_iter and z.abs2 < ESCAPE_RADIUS_SQ:
        z = z * z + k
        n += 1
    return n


def escape_function(kind: FractalKind,
                    julia_constant: Complex = DEFAULT_JULIA_CONSTANT) -> EscapeFunction:
    if kind == FractalKind.JULIA:
        return partial(julia, k=julia_constant)
    return mandelbrot


def max_iterations_for(min_x: float, max_x: float,
                       settings: FractalSettings = None) -> int:
    """
    Iteration bound that grows with the zoom level.
    zoom = 2 / width, bound = base * log2(zoom + 1), clamped.
    """
    settings = settings or FractalSettings()
    if settings.max_iter is not None:
        return int(settings.max_iter)
    zoom_level = 2.0 / (max_x - min_x)
    n = int(settings.base_iterations * math.log2(zoom_level + 1))
    return max(settings.min_iterations, min(settings.max_iterations, n))
