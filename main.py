import logging
import sys

from PySide6.QtWidgets import QApplication

from ui.view import FractalViewer

logging.basicConfig(level=logging.INFO,
                    format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = QApplication(sys.argv)
viewer = FractalViewer()
viewer.show()
sys.exit(app.exec())
