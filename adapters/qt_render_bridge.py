from typing import Callable

from PySide6.QtCore import QObject, Qt, Signal
from PySide6.QtGui import QImage

from rendering.events import FrameEvent, LogEvent
from utils.image_helpers import ndarray_to_qimage


class QtRenderBridge(QObject):
    """
    Thin adapter between the explorer core and Qt:
      - converts frame/log events to Qt signals (delivered on the GUI thread),
      - provides `post`, which queues a callable onto the GUI thread so tour
        steps mutate the viewport only from the owner thread.
    """
    image_updated = Signal(QImage, int, int)
    log_text = Signal(str)
    _invoke = Signal(object)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._invoke.connect(self._run, Qt.ConnectionType.QueuedConnection)

    # --------- Core callbacks (any thread) -----
    def on_frame(self, evt: FrameEvent) -> None:
        qimg = ndarray_to_qimage(evt.data).copy()
        self.image_updated.emit(qimg, evt.width, evt.height)

    def on_log(self, evt: LogEvent) -> None:
        self.log_text.emit(evt.message)

    def post(self, fn: Callable[[], None]) -> None:
        self._invoke.emit(fn)

    # --------- GUI thread -----
    def _run(self, fn) -> None:
        fn()
