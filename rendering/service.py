from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from rendering.core import RenderRequest
from rendering.events import FrameEvent, LogEvent
from rendering.executor import BandExecutor, CancelToken
from utils.enums import RenderOutcome

logger = logging.getLogger(__name__)


class RenderJob:
    """Handle for one dispatched render; resolves to a RenderOutcome."""

    def __init__(self, seq: int, request: RenderRequest) -> None:
        self.seq = seq
        self.request = request
        self.token = CancelToken()
        self.outcome: Optional[RenderOutcome] = None
        self.frame: Optional[FrameEvent] = None
        self._done = threading.Event()

    def cancel(self) -> None:
        self.token.cancel()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> Optional[RenderOutcome]:
        self._done.wait(timeout)
        return self.outcome

    def _resolve(self, outcome: RenderOutcome, frame: Optional[FrameEvent] = None) -> None:
        self.outcome = outcome
        self.frame = frame
        self._done.set()


class RenderService:
    """
    Owner-facing render scheduler:
      - at most one live job; starting a render cancels the previous one,
      - jobs run off the calling thread and compute bands on the executor,
      - a finished frame is published only if its job is still current,
        so an older job can never overwrite a newer job's output.
    """

    def __init__(self, executor: Optional[BandExecutor] = None,
                 max_workers: Optional[int] = None) -> None:
        self.executor = executor or BandExecutor(max_workers)

        self._lock = threading.RLock()
        self._render_seq = 0
        self._current: Optional[RenderJob] = None
        self.last_frame: Optional[FrameEvent] = None

        # Callbacks
        self.on_frame: Optional[Callable[[FrameEvent], None]] = None
        self.on_log: Optional[Callable[[LogEvent], None]] = None

    @property
    def current_job(self) -> Optional[RenderJob]:
        return self._current

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------

    def start_render(self, request: RenderRequest) -> RenderJob:
        with self._lock:
            if self._current is not None:
                self._current.cancel()
            self._render_seq += 1
            job = RenderJob(self._render_seq, request)
            self._current = job

        worker = threading.Thread(target=self._run_job, args=(job,),
                                  name=f"render-job-{job.seq}", daemon=True)
        worker.start()
        return job

    def render_sync(self, request: RenderRequest) -> FrameEvent:
        """Computes a frame on the calling thread, outside the job sequence."""
        iters, rgb = self.executor.render(request)
        return FrameEvent(rgb, iters, request.width, request.height, 0, request.max_iter)

    def stop(self) -> None:
        with self._lock:
            if self._current is not None:
                self._current.cancel()

    def shutdown(self) -> None:
        """Cancel the live job and release the band pool."""
        try:
            self.stop()
        finally:
            self.executor.close()

    # ---------------------------------------------------------------------
    # Worker routine
    # ---------------------------------------------------------------------

    def _run_job(self, job: RenderJob) -> None:
        start = time.time()
        req = job.request
        try:
            result = self.executor.render(req, job.token)
        except Exception as e:
            logger.exception("Render job %d failed", job.seq)
            self._emit_log(f"[RenderService] Render error: {e}", "error")
            job._resolve(RenderOutcome.FAILED)
            return

        if result is None:
            logger.debug("Render job %d superseded before completion", job.seq)
            job._resolve(RenderOutcome.SUPERSEDED)
            return

        iters, rgb = result
        frame = FrameEvent(rgb, iters, req.width, req.height, job.seq, req.max_iter)

        with self._lock:
            if job.token.is_cancelled() or job is not self._current:
                logger.debug("Render job %d superseded before publish", job.seq)
                job._resolve(RenderOutcome.SUPERSEDED)
                return
            try:
                if self.on_frame:
                    self.on_frame(frame)
            except Exception as e:
                logger.exception("Frame consumer failed for job %d", job.seq)
                self._emit_log(f"[RenderService] Frame delivery error: {e}", "error")
                job._resolve(RenderOutcome.FAILED)
                return
            self.last_frame = frame

            elapsed = round(time.time() - start, 3)
            logger.info("Frame %d (%dx%d, max_iter=%d) rendered in %ss",
                        job.seq, req.width, req.height, req.max_iter, elapsed)
            self._emit_log(f"Render time: {elapsed}s", "info")
            job._resolve(RenderOutcome.PUBLISHED, frame)

    def _emit_log(self, message: str, level: Optional[str]) -> None:
        if self.on_log:
            self.on_log(LogEvent(message, level=level))
