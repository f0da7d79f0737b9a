import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from fractals.complex_value import Complex
from utils.enums import FractalKind, ColorScheme


DEFAULT_JULIA_CONSTANT = Complex(-0.7, 0.027015)


class ViewportError(ValueError):
    """Raised for a viewport that cannot be mapped onto a pixel surface."""


@dataclass(frozen=True)
class ViewportSnapshot:
    """
    Immutable copy of the four plane bounds.
    Used for the undo history and for tour keyframes.
    """
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    @property
    def extent(self) -> Tuple[float, float]:
        return (self.max_x - self.min_x, self.max_y - self.min_y)


HOME_VIEW = ViewportSnapshot(min_x=-2.0, max_x=1.0, min_y=-1.0, max_y=1.0)


@dataclass
class Viewport:
    """
    Holds the viewport parameters for rendering a fractal.
    X and Y limits determine the area of the complex plane on screen.
    Width and Height determine the size of the pixel surface.

    This is the live view state; only the owner thread mutates it. Render
    jobs work on a converter captured from it at dispatch time.
    """
    min_x: float = HOME_VIEW.min_x
    max_x: float = HOME_VIEW.max_x
    min_y: float = HOME_VIEW.min_y
    max_y: float = HOME_VIEW.max_y
    width: int = 0
    height: int = 0

    @property
    def x_den(self) -> float:
        """Pixels per plane unit along x."""
        return self.width / (self.max_x - self.min_x)

    @property
    def y_den(self) -> float:
        """Pixels per plane unit along y."""
        return self.height / (self.max_y - self.min_y)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def resize(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)

    def snapshot(self) -> ViewportSnapshot:
        return ViewportSnapshot(self.min_x, self.max_x, self.min_y, self.max_y)

    def restore(self, state: ViewportSnapshot) -> None:
        self.min_x = state.min_x
        self.max_x = state.max_x
        self.min_y = state.min_y
        self.max_y = state.max_y

    def shift(self, dx: float, dy: float) -> None:
        self.min_x += dx
        self.max_x += dx
        self.min_y += dy
        self.max_y += dy

    def validate(self) -> None:
        bounds = (self.min_x, self.max_x, self.min_y, self.max_y)
        if not all(math.isfinite(v) for v in bounds):
            raise ViewportError(f"Viewport bounds must be finite, got {bounds}")
        if self.max_x <= self.min_x or self.max_y <= self.min_y:
            raise ViewportError(
                f"Degenerate viewport: x=[{self.min_x}, {self.max_x}], "
                f"y=[{self.min_y}, {self.max_y}]")
        if self.width <= 0 or self.height <= 0:
            raise ViewportError(
                f"Viewport needs a positive pixel size, got {self.width}x{self.height}")


@dataclass
class FractalSettings:
    """
    Holds the rendering settings for the explorer.
    Max_iter pins the iteration bound; None derives it from the zoom level.
    Workers is the number of row bands rendered in parallel (None = CPU count).
    Custom_palette lists the control colors of the CUSTOM scheme.
    """
    fractal: FractalKind = FractalKind.MANDELBROT
    color_scheme: ColorScheme = ColorScheme.RAINBOW
    julia_constant: Complex = DEFAULT_JULIA_CONSTANT
    max_iter: Optional[int] = None
    base_iterations: int = 200
    min_iterations: int = 50
    max_iterations: int = 5000
    workers: Optional[int] = None
    custom_palette: Optional[List[Tuple[int, int, int]]] = field(default=None)
