import threading

import numpy as np
import pytest

from fractals.base import FractalSettings, Viewport
from fractals.complex_value import Complex
from fractals.escape import escape_function
from rendering.core import RenderRequest, render_band
from rendering.executor import BandExecutor, CancelToken, split_bands
from utils.enums import ColorScheme, FractalKind, RenderOutcome


def make_request(width=64, height=48, preview=False, **settings):
    settings.setdefault("workers", 4)
    vp = Viewport(width=width, height=height)
    return RenderRequest.build(vp, FractalSettings(**settings), preview=preview)


def test_split_bands_keeps_every_row():
    assert split_bands(10, 3) == [(0, 3), (3, 6), (6, 10)]
    assert split_bands(2, 8) == [(0, 1), (1, 2)]
    assert split_bands(7, 1) == [(0, 7)]
    for h, n in [(480, 6), (481, 8), (1, 4)]:
        bands = split_bands(h, n)
        assert bands[0][0] == 0 and bands[-1][1] == h
        assert all(a[1] == b[0] for a, b in zip(bands, bands[1:]))


def test_request_snapshots_viewport():
    vp = Viewport(width=64, height=48)
    req = RenderRequest.build(vp, FractalSettings(workers=3))
    vp.shift(1.0, 1.0)
    assert req.converter.min_x == -2.0
    assert req.max_iter == 147
    assert req.workers == 3
    assert RenderRequest.build(vp, FractalSettings(), preview=True).workers == 1


@pytest.mark.parametrize("kind", [FractalKind.MANDELBROT, FractalKind.JULIA])
def test_frame_matches_scalar_evaluator(service, kind):
    req = make_request(fractal=kind, max_iter=120)
    frame = service.render_sync(req)
    assert frame.iterations.shape == (48, 64)
    assert frame.data.shape == (48, 64, 3)
    f = escape_function(kind, req.julia_constant)
    conv = req.converter
    for x, y in [(0, 0), (63, 47), (32, 24), (10, 40), (50, 5)]:
        c = Complex(conv.screen_to_plane_x(x), conv.screen_to_plane_y(y))
        assert frame.iterations[y, x] == f(c, 120)


def test_band_count_does_not_change_frame(service):
    one = service.render_sync(make_request(workers=1, max_iter=80))
    many = service.render_sync(make_request(workers=7, max_iter=80))
    assert np.array_equal(one.iterations, many.iterations)
    assert np.array_equal(one.data, many.data)


def test_preview_is_single_band_binary(service):
    req = make_request(preview=True)
    frame = service.render_sync(req)
    colors = {tuple(c) for c in frame.data.reshape(-1, 3)}
    assert colors <= {(255, 0, 0), (255, 255, 255)}
    assert len(colors) == 2


def test_cancelled_token_discards_work():
    req = make_request()
    token = CancelToken()
    token.cancel()
    assert render_band(req, 0, 10, token) is None
    executor = BandExecutor(max_workers=2)
    try:
        assert executor.render(req, token) is None
    finally:
        executor.close()


def test_job_publishes_frame(service):
    frames, logs = [], []
    service.on_frame = frames.append
    service.on_log = logs.append
    job = service.start_render(make_request())
    assert job.wait(30) == RenderOutcome.PUBLISHED
    assert [f.seq for f in frames] == [job.seq]
    assert service.last_frame is job.frame
    assert any(e.message.startswith("Render time") for e in logs)


def test_newer_request_supersedes_older(service):
    frames = []
    lock = threading.Lock()

    def collect(evt):
        with lock:
            frames.append(evt)

    service.on_frame = collect
    job_a = service.start_render(make_request(320, 240, max_iter=3000, color_scheme=ColorScheme.FIRE))
    req_b = make_request(96, 64, fractal=FractalKind.JULIA, max_iter=90)
    job_b = service.start_render(req_b)

    assert job_b.wait(60) == RenderOutcome.PUBLISHED
    assert job_a.wait(60) in (RenderOutcome.SUPERSEDED, RenderOutcome.PUBLISHED)
    assert job_a.token.is_cancelled()

    seqs = [f.seq for f in frames]
    assert seqs == sorted(seqs)
    assert frames[-1].seq == job_b.seq
    expected = service.render_sync(req_b)
    assert np.array_equal(frames[-1].iterations, expected.iterations)
    assert np.array_equal(service.last_frame.data, expected.data)


def test_stop_cancels_live_job(service):
    job = service.start_render(make_request(400, 300, max_iter=5000))
    service.stop()
    assert job.token.is_cancelled()
    assert job.wait(60) in (RenderOutcome.SUPERSEDED, RenderOutcome.PUBLISHED)


def test_band_failure_is_reported_not_raised(service, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("kernel exploded")

    monkeypatch.setattr("rendering.executor.render_band", broken)
    logs = []
    service.on_log = logs.append
    job = service.start_render(make_request())
    assert job.wait(30) == RenderOutcome.FAILED
    assert any(e.level == "error" and "kernel exploded" in e.message for e in logs)


def test_frame_pixels_as_draw_commands(service):
    frame = service.render_sync(make_request(8, 4))
    pixels = list(frame.pixels())
    assert len(pixels) == 32
    assert (pixels[0].x, pixels[0].y) == (0, 0)
    assert (pixels[-1].x, pixels[-1].y) == (7, 3)
    assert pixels[9].color == tuple(int(c) for c in frame.data[1, 1])
