import threading
import time

import pytest

from fractals.base import HOME_VIEW, Viewport, ViewportSnapshot
from navigation.tour import TourEngine, interpolate
from utils.easing import ease_in_out_cubic
from utils.enums import TourState

DEEP = ViewportSnapshot(-0.75, -0.74, 0.10, 0.11)
SIDE = ViewportSnapshot(0.2, 0.5, -0.1, 0.1)


class Collector:
    """Stands in for an event loop: queues posted steps until drained."""

    def __init__(self):
        self.pending = []
        self._lock = threading.Lock()

    def __call__(self, fn):
        with self._lock:
            self.pending.append(fn)

    def wait_for(self, n, timeout=5.0):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            with self._lock:
                if len(self.pending) >= n:
                    return True
            time.sleep(0.005)
        return False

    def drain(self):
        with self._lock:
            todo, self.pending = self.pending, []
        for fn in todo:
            fn()
        return len(todo)


def as_tuple(s):
    return (s.min_x, s.max_x, s.min_y, s.max_y)


def test_easing_endpoints_and_symmetry():
    assert ease_in_out_cubic(0.0) == 0.0
    assert ease_in_out_cubic(1.0) == 1.0
    assert ease_in_out_cubic(0.5) == pytest.approx(0.5)
    for t in (0.1, 0.25, 0.4):
        assert ease_in_out_cubic(t) + ease_in_out_cubic(1 - t) == pytest.approx(1.0)
    values = [ease_in_out_cubic(i / 60) for i in range(61)]
    assert values == sorted(values)


def test_interpolate_moves_from_start_to_end():
    assert interpolate(HOME_VIEW, DEEP, 0.0) == HOME_VIEW
    assert as_tuple(interpolate(HOME_VIEW, DEEP, 1.0)) == pytest.approx(as_tuple(DEEP))
    mid = interpolate(HOME_VIEW, DEEP, 0.5)
    assert mid.min_x == pytest.approx((HOME_VIEW.min_x + DEEP.min_x) / 2)


def test_needs_two_keyframes(viewport):
    tour = TourEngine(viewport)
    assert not tour.start()
    tour.add_keyframe()
    assert not tour.start()
    assert tour.state == TourState.IDLE


def test_frames_cover_every_pair(viewport):
    tour = TourEngine(viewport, steps=4)
    tour.add_keyframe(HOME_VIEW)
    tour.add_keyframe(DEEP)
    tour.add_keyframe(SIDE)
    frames = list(tour.frames())
    # 5 states for the first transition, the shared keyframe is not repeated
    assert len(frames) == 5 + 4
    assert frames[0] == HOME_VIEW
    assert as_tuple(frames[4]) == pytest.approx(as_tuple(DEEP))
    assert frames[5] == interpolate(DEEP, SIDE, ease_in_out_cubic(0.25))
    assert as_tuple(frames[-1]) == pytest.approx(as_tuple(SIDE))
    assert all(a != b for a, b in zip(frames, frames[1:]))


def test_two_keyframes_take_steps_plus_one_states(viewport):
    tour = TourEngine(viewport, steps=60)
    tour.add_keyframe(HOME_VIEW)
    tour.add_keyframe(DEEP)
    assert len(list(tour.frames())) == 61


def test_add_keyframe_snapshots_current_view(viewport):
    tour = TourEngine(viewport)
    saved = tour.add_keyframe()
    viewport.shift(1.0, 1.0)
    assert tour.keyframes == (saved,)
    assert saved == HOME_VIEW
    tour.clear_keyframes()
    assert tour.keyframes == ()


def test_short_tour_runs_on_owner_thread():
    vp = Viewport(width=300, height=200)
    tour = TourEngine(vp, duration=0.05, steps=5)
    steps, writers, finished = [], set(), threading.Event()

    def on_step(state):
        writers.add(threading.current_thread())
        steps.append(state)

    tour.on_step = on_step
    tour.on_finished = finished.set
    tour.add_keyframe(HOME_VIEW)
    tour.add_keyframe(DEEP)

    assert tour.start()
    assert tour.wait(5.0)
    # the timing thread only queues; nothing has touched the view yet
    assert steps == []
    assert tour.is_running

    assert tour.process_pending() == 6 + 1
    assert writers == {threading.current_thread()}
    assert finished.is_set()
    assert tour.state == TourState.IDLE
    assert len(steps) == 6
    assert as_tuple(vp.snapshot()) == pytest.approx(as_tuple(DEEP))
    assert tour.process_pending() == 0


def test_stop_drops_pending_steps(viewport):
    post = Collector()
    tour = TourEngine(viewport, duration=10.0, steps=5, post=post)
    tour.add_keyframe(DEEP)
    tour.add_keyframe(SIDE)

    assert tour.start()
    assert post.wait_for(1)
    tour.stop()
    assert not tour.is_running
    post.drain()
    assert viewport.snapshot() == HOME_VIEW


def test_restart_replaces_previous_run(viewport):
    post = Collector()
    tour = TourEngine(viewport, duration=10.0, steps=5, post=post)
    applied = []
    tour.on_step = applied.append
    tour.add_keyframe(DEEP)
    tour.add_keyframe(SIDE)

    assert tour.start()
    assert post.wait_for(1)
    tour.clear_keyframes()
    tour.add_keyframe(SIDE)
    tour.add_keyframe(DEEP)
    assert tour.start()
    assert post.wait_for(2)
    assert post.drain() == 2

    # only the second run's first step lands
    assert applied == [SIDE]
    assert viewport.snapshot() == SIDE
    tour.stop()


def test_stop_waits_for_step_in_flight(viewport):
    post = Collector()
    tour = TourEngine(viewport, duration=10.0, steps=5, post=post)
    events = []
    stopper = []
    restore = viewport.restore

    def restore_then_stop(state):
        restore(state)
        # a stop arriving from another thread while the step is applied
        t = threading.Thread(target=lambda: (tour.stop(), events.append("stopped")))
        t.start()
        t.join(0.2)
        stopper.append(t)

    viewport.restore = restore_then_stop
    tour.on_step = lambda state: events.append("step")
    tour.add_keyframe(DEEP)
    tour.add_keyframe(SIDE)

    assert tour.start()
    assert post.wait_for(1)
    post.drain()
    stopper[0].join(5.0)

    assert events == ["step", "stopped"]
    assert not tour.is_running
    # later steps of the stopped run never reach the callback
    post.drain()
    assert events == ["step", "stopped"]
