import math
from dataclasses import dataclass

from fractals.base import ViewportError


@dataclass(frozen=True)
class CoordinateConverter:
    """
    Maps screen pixels onto the complex plane and back for a fixed viewport.

    Screen y grows downward while plane y grows upward, so the y axis is
    inverted in both directions: pixel row 0 is max_y. All methods work on
    scalars and on numpy arrays alike.
    """
    min_x: float
    max_x: float
    min_y: float
    max_y: float
    width: int
    height: int

    def __post_init__(self):
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

    @classmethod
    def from_viewport(cls, vp) -> "CoordinateConverter":
        """Captures the current bounds and size of any viewport-like object."""
        return cls(float(vp.min_x), float(vp.max_x), float(vp.min_y),
                   float(vp.max_y), int(vp.width), int(vp.height))

    # ---- screen -> plane ---------------------------------------------------

    def screen_to_plane_x(self, x_px):
        return self.min_x + x_px / self.width * (self.max_x - self.min_x)

    def screen_to_plane_y(self, y_px):
        return self.max_y - y_px / self.height * (self.max_y - self.min_y)

    def screen_to_plane(self, x_px, y_px):
        return self.screen_to_plane_x(x_px), self.screen_to_plane_y(y_px)

    # ---- plane -> screen ---------------------------------------------------

    def plane_to_screen_x(self, x):
        return (x - self.min_x) / (self.max_x - self.min_x) * self.width

    def plane_to_screen_y(self, y):
        return (self.max_y - y) / (self.max_y - self.min_y) * self.height

    def plane_to_screen(self, x, y):
        return self.plane_to_screen_x(x), self.plane_to_screen_y(y)
