from __future__ import annotations

import logging
import queue
import threading
from functools import partial
from typing import Callable, Iterator, List, Optional, Tuple

from fractals.base import Viewport, ViewportSnapshot
from utils.easing import ease_in_out_cubic, lerp
from utils.enums import TourState

logger = logging.getLogger(__name__)


def interpolate(start: ViewportSnapshot, end: ViewportSnapshot, t: float) -> ViewportSnapshot:
    return ViewportSnapshot(
        lerp(start.min_x, end.min_x, t),
        lerp(start.max_x, end.max_x, t),
        lerp(start.min_y, end.min_y, t),
        lerp(start.max_y, end.max_y, t),
    )


class TourEngine:
    """
    Animates the viewport through the saved keyframes.

    Each consecutive keyframe pair is animated over `duration` seconds in
    `steps` eased steps. Timing runs on a background thread; every step is
    handed to `post`, which must run it on the owner thread. Without a
    `post` the steps are queued until the owner calls process_pending().
    A step carries the id of its run and is dropped if that run was stopped
    or replaced, so stopping never leaves a pending viewport write behind.
    """

    def __init__(self, viewport: Viewport, duration: float = 3.0, steps: int = 60,
                 post: Optional[Callable[[Callable[[], None]], None]] = None) -> None:
        self.viewport = viewport
        self.duration = float(duration)
        self.steps = max(1, int(steps))
        self._pending: "queue.SimpleQueue[Callable[[], None]]" = queue.SimpleQueue()
        self.post = post or self._pending.put

        self.on_step: Optional[Callable[[ViewportSnapshot], None]] = None
        self.on_finished: Optional[Callable[[], None]] = None

        self._keyframes: List[ViewportSnapshot] = []
        self._state = TourState.IDLE
        self._run_id = 0
        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ---- Keyframes ------------------------------------------------------

    @property
    def keyframes(self) -> Tuple[ViewportSnapshot, ...]:
        return tuple(self._keyframes)

    def add_keyframe(self, state: Optional[ViewportSnapshot] = None) -> ViewportSnapshot:
        state = state or self.viewport.snapshot()
        self._keyframes.append(state)
        return state

    def clear_keyframes(self) -> None:
        self._keyframes.clear()

    # ---- State ----------------------------------------------------------

    @property
    def state(self) -> TourState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == TourState.RUNNING

    def frames(self) -> Iterator[ViewportSnapshot]:
        """
        All viewport states of one tour. Every keyframe appears once: a
        transition after the first starts where the previous one ended.
        """
        keyframes = list(self._keyframes)
        for i, (start, end) in enumerate(zip(keyframes, keyframes[1:])):
            for step in range(0 if i == 0 else 1, self.steps + 1):
                yield interpolate(start, end, ease_in_out_cubic(step / self.steps))

    # ---- Lifecycle ------------------------------------------------------

    def start(self) -> bool:
        if len(self._keyframes) < 2:
            logger.info("Tour needs at least 2 keyframes, have %d", len(self._keyframes))
            return False
        self.stop()
        with self._lock:
            self._run_id += 1
            run_id = self._run_id
            self._stop = threading.Event()
            self._state = TourState.RUNNING
            stop = self._stop
        self._thread = threading.Thread(target=self._run, args=(run_id, list(self.frames()), stop),
                                        name=f"tour-{run_id}", daemon=True)
        self._thread.start()
        logger.info("Tour %d started over %d keyframes", run_id, len(self._keyframes))
        return True

    def stop(self) -> None:
        with self._lock:
            if self._state != TourState.RUNNING:
                return
            self._run_id += 1
            self._stop.set()
            self._state = TourState.IDLE
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)
        logger.info("Tour stopped")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Blocks until the timing thread has posted its last step; True once it
        exited. Queued steps still need process_pending() afterwards.
        """
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        return thread is None or not thread.is_alive()

    def process_pending(self) -> int:
        """Runs the queued steps on the calling (owner) thread."""
        done = 0
        while True:
            try:
                fn = self._pending.get_nowait()
            except queue.Empty:
                return done
            fn()
            done += 1

    # ---- Timing thread --------------------------------------------------

    def _run(self, run_id: int, frames: List[ViewportSnapshot], stop: threading.Event) -> None:
        interval = self.duration / self.steps
        for state in frames:
            if stop.is_set():
                return
            self.post(partial(self._apply, run_id, state))
            if stop.wait(interval):
                return
        self.post(partial(self._finish, run_id))

    def _apply(self, run_id: int, state: ViewportSnapshot) -> None:
        with self._lock:
            if run_id != self._run_id:
                return
            self.viewport.restore(state)
            # callback stays under the lock; stop() cannot interleave with it
            if self.on_step:
                self.on_step(state)

    def _finish(self, run_id: int) -> None:
        with self._lock:
            if run_id != self._run_id:
                return
            self._state = TourState.IDLE
            logger.info("Tour %d finished", run_id)
            if self.on_finished:
                self.on_finished()
