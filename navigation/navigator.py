from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Optional, Tuple

from fractals.base import HOME_VIEW, Viewport, ViewportSnapshot
from utils.coords import CoordinateConverter

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class Navigator:
    """
    Zoom, pan, rectangle-select, reset and undo on the live viewport.

    History is most-recent-first and holds committed views: its top entry is
    the view the last navigation action produced. It is bounded; the oldest
    entry is dropped once history_size is exceeded.
    """

    def __init__(self, viewport: Viewport, history_size: int = 100,
                 zoom_factor: float = 2.0, home: ViewportSnapshot = HOME_VIEW) -> None:
        if zoom_factor <= 1.0:
            raise ValueError(f"zoom_factor must be > 1, got {zoom_factor}")
        self.viewport = viewport
        self.zoom_factor = float(zoom_factor)
        self.home = home
        self._history: Deque[ViewportSnapshot] = deque(maxlen=int(history_size))
        self._drag_last: Optional[Point] = None
        self.commit()

    # ---- History --------------------------------------------------------

    @property
    def history(self) -> Tuple[ViewportSnapshot, ...]:
        return tuple(self._history)

    @property
    def can_undo(self) -> bool:
        return len(self._history) > 1 or self._history[0] != self.viewport.snapshot()

    def commit(self) -> ViewportSnapshot:
        """Records the current view on top of the history."""
        state = self.viewport.snapshot()
        self._history.appendleft(state)
        return state

    def undo(self) -> bool:
        """
        Returns to the previous committed view. If the view has moved since
        the last commit (tour step, unfinished drag) it returns to that commit
        instead. The oldest remaining entry is never undone.
        """
        top = self._history[0]
        if self.viewport.snapshot() != top:
            self.viewport.restore(top)
            return True
        if len(self._history) <= 1:
            return False
        self._history.popleft()
        self.viewport.restore(self._history[0])
        return True

    # ---- Zoom / reset ---------------------------------------------------

    def _scale_about_center(self, scale: float) -> None:
        vp = self.viewport
        cx = (vp.min_x + vp.max_x) / 2
        cy = (vp.min_y + vp.max_y) / 2
        half_w = (vp.max_x - vp.min_x) * 0.5 * scale
        half_h = (vp.max_y - vp.min_y) * 0.5 * scale
        vp.min_x, vp.max_x = cx - half_w, cx + half_w
        vp.min_y, vp.max_y = cy - half_h, cy + half_h

    def zoom_in(self) -> None:
        self._scale_about_center(1.0 / self.zoom_factor)
        self.commit()

    def zoom_out(self) -> None:
        self._scale_about_center(self.zoom_factor)
        self.commit()

    def reset_view(self) -> None:
        self.viewport.restore(self.home)
        self.commit()

    # ---- Drag (pan) -----------------------------------------------------

    @property
    def dragging(self) -> bool:
        return self._drag_last is not None

    def begin_drag(self, x: float, y: float) -> None:
        self.viewport.validate()
        self._drag_last = (float(x), float(y))

    def drag_to(self, x: float, y: float) -> bool:
        """
        Pans so the plane point under the pointer follows it. Not committed
        to history until end_drag(). Raises ViewportError without a surface.
        """
        if self._drag_last is None:
            return False
        vp = self.viewport
        vp.validate()
        last_x, last_y = self._drag_last
        dx = (last_x - x) / vp.x_den
        dy = (y - last_y) / vp.y_den
        vp.shift(dx, dy)
        self._drag_last = (float(x), float(y))
        return True

    def end_drag(self) -> bool:
        if self._drag_last is None:
            return False
        self._drag_last = None
        if self.viewport.snapshot() != self._history[0]:
            self.commit()
        return True

    # ---- Rectangle select ----------------------------------------------

    def rectangle_select(self, start: Point, end: Point) -> bool:
        """
        Zooms onto the dragged screen rectangle. The shorter side is grown
        around the selection center so the plane keeps the screen aspect.
        A zero-area selection is ignored.
        """
        x1, x2 = sorted((float(start[0]), float(end[0])))
        y1, y2 = sorted((float(start[1]), float(end[1])))
        if x1 == x2 and y1 == y2:
            logger.debug("Ignoring zero-area selection at (%s, %s)", x1, y1)
            return False

        vp = self.viewport
        conv = CoordinateConverter.from_viewport(vp)
        new_min_x = conv.screen_to_plane_x(x1)
        new_max_x = conv.screen_to_plane_x(x2)
        new_min_y = conv.screen_to_plane_y(y2)    # screen y is inverted
        new_max_y = conv.screen_to_plane_y(y1)

        screen_aspect = vp.width / vp.height
        sel_w = new_max_x - new_min_x
        sel_h = new_max_y - new_min_y

        if sel_w > sel_h * screen_aspect:
            # Selection is wider than the screen: grow height
            cy = (new_min_y + new_max_y) / 2
            new_h = sel_w / screen_aspect
            vp.min_x, vp.max_x = new_min_x, new_max_x
            vp.min_y, vp.max_y = cy - new_h / 2, cy + new_h / 2
        else:
            # Selection is taller than the screen: grow width
            cx = (new_min_x + new_max_x) / 2
            new_w = sel_h * screen_aspect
            vp.min_x, vp.max_x = cx - new_w / 2, cx + new_w / 2
            vp.min_y, vp.max_y = new_min_y, new_max_y

        self.commit()
        return True
