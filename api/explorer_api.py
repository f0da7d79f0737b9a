from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, Tuple

from fractals.base import FractalSettings, Viewport, ViewportSnapshot
from fractals.complex_value import Complex
from fractals.escape import max_iterations_for
from navigation.navigator import Navigator
from navigation.tour import TourEngine
from rendering.core import RenderRequest
from rendering.events import FrameEvent, LogEvent
from rendering.service import RenderJob, RenderService
from utils.coords import CoordinateConverter
from utils.enums import ColorScheme, FractalKind

logger = logging.getLogger(__name__)


class ExplorerAPI:
    """
    Owner-side facade over the view state, navigation, tour and renderer.

    All methods are meant to be called from one owner thread (the UI
    thread). Every display-affecting change triggers a new render when
    auto_render is on; the previous render is superseded.
    """

    def __init__(self, width: int = 800, height: int = 600,
                 settings: Optional[FractalSettings] = None,
                 service: Optional[RenderService] = None,
                 post: Optional[Callable[[Callable[[], None]], None]] = None,
                 auto_render: bool = True,
                 history_size: int = 100,
                 zoom_factor: float = 2.0,
                 tour_duration: float = 3.0,
                 tour_steps: int = 60) -> None:
        self.settings = settings or FractalSettings()
        self.viewport = Viewport(width=int(width), height=int(height))
        self.navigator = Navigator(self.viewport, history_size=history_size,
                                   zoom_factor=zoom_factor)
        self.tour = TourEngine(self.viewport, duration=tour_duration,
                               steps=tour_steps, post=post)
        self.tour.on_step = lambda _state: self._changed()
        self.service = service or RenderService(max_workers=self.settings.workers)
        self.auto_render = auto_render

    # ---- Event subscriptions --------------------------------------------

    def on_frame(self, cb: Callable[[FrameEvent], None]) -> None:
        self.service.on_frame = cb

    def on_log(self, cb: Callable[[LogEvent], None]) -> None:
        self.service.on_log = cb

    # ---- Read-only state ------------------------------------------------

    @property
    def bounds(self) -> ViewportSnapshot:
        return self.viewport.snapshot()

    @property
    def max_iterations(self) -> int:
        return max_iterations_for(self.viewport.min_x, self.viewport.max_x, self.settings)

    @property
    def converter(self) -> CoordinateConverter:
        return CoordinateConverter.from_viewport(self.viewport)

    # ---- Rendering ------------------------------------------------------

    def render(self, preview: bool = False) -> Optional[RenderJob]:
        if not self.has_surface:
            logger.debug("No surface attached yet; skipping render")
            return None
        self.viewport.validate()
        request = RenderRequest.build(self.viewport, self.settings, preview=preview)
        return self.service.start_render(request)

    def _changed(self) -> Optional[RenderJob]:
        if self.auto_render:
            return self.render()
        return None

    # ---- Input events ---------------------------------------------------

    def resize(self, width: int, height: int) -> Optional[RenderJob]:
        self.viewport.resize(width, height)
        return self._changed()

    @property
    def has_surface(self) -> bool:
        return self.viewport.width > 0 and self.viewport.height > 0

    def drag_start(self, x: float, y: float) -> bool:
        if not self.has_surface:
            logger.debug("No surface attached yet; ignoring drag")
            return False
        self.navigator.begin_drag(x, y)
        return True

    def drag_move(self, x: float, y: float) -> Optional[RenderJob]:
        if not self.has_surface:
            return None
        if self.navigator.drag_to(x, y):
            return self._changed()
        return None

    def drag_end(self) -> bool:
        return self.navigator.end_drag()

    def rectangle_select(self, start: Tuple[float, float],
                         end: Tuple[float, float]) -> Optional[RenderJob]:
        if self.navigator.rectangle_select(start, end):
            return self._changed()
        return None

    # ---- Menu actions ---------------------------------------------------

    def zoom_in(self) -> Optional[RenderJob]:
        self.navigator.zoom_in()
        return self._changed()

    def zoom_out(self) -> Optional[RenderJob]:
        self.navigator.zoom_out()
        return self._changed()

    def reset_view(self) -> Optional[RenderJob]:
        self.navigator.reset_view()
        return self._changed()

    def undo(self) -> Optional[RenderJob]:
        if self.navigator.undo():
            return self._changed()
        return None

    def set_fractal_type(self, name) -> Optional[RenderJob]:
        kind = FractalKind.parse(name)
        if kind is None:
            logger.warning("Unknown fractal type %r, using mandelbrot", name)
            kind = FractalKind.MANDELBROT
        self.settings.fractal = kind
        return self._changed()

    def set_color_scheme(self, scheme) -> Optional[RenderJob]:
        parsed = ColorScheme.parse(scheme)
        if parsed is None:
            logger.warning("Unknown color scheme %r, using RAINBOW", scheme)
            parsed = ColorScheme.RAINBOW
        self.settings.color_scheme = parsed
        return self._changed()

    def set_custom_palette(self, colors: Optional[Sequence[Tuple[int, int, int]]]) -> Optional[RenderJob]:
        self.settings.custom_palette = list(colors) if colors else None
        if self.settings.color_scheme == ColorScheme.CUSTOM:
            return self._changed()
        return None

    def set_julia_constant(self, constant) -> Optional[RenderJob]:
        if not isinstance(constant, Complex):
            constant = Complex.from_complex(constant)
        self.settings.julia_constant = constant
        if self.settings.fractal == FractalKind.JULIA:
            return self._changed()
        return None

    def pick_julia_constant(self, x: float, y: float) -> Complex:
        """Uses the plane point under screen pixel (x, y) as the Julia constant."""
        re, im = self.converter.screen_to_plane(x, y)
        constant = Complex(float(re), float(im))
        self.set_julia_constant(constant)
        return constant

    def set_max_iter(self, value: Optional[int]) -> Optional[RenderJob]:
        self.settings.max_iter = None if value is None else int(value)
        return self._changed()

    # ---- Tour -----------------------------------------------------------

    def add_keyframe(self) -> ViewportSnapshot:
        return self.tour.add_keyframe()

    def clear_keyframes(self) -> None:
        self.tour.clear_keyframes()

    def start_tour(self) -> bool:
        return self.tour.start()

    def stop_tour(self) -> None:
        self.tour.stop()

    def process_pending(self) -> int:
        """
        Applies queued tour steps on the calling thread. Only needed when the
        explorer was built without a `post` that marshals them itself.
        """
        return self.tour.process_pending()

    # ---- Lifecycle ------------------------------------------------------

    def shutdown(self) -> None:
        try:
            self.tour.stop()
        finally:
            self.service.shutdown()
