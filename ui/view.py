from PySide6.QtCore import Qt, QTimer, QRect, QSize, QPoint
from PySide6.QtGui import QAction, QActionGroup, QImage, QPixmap
from PySide6.QtWidgets import QLabel, QMainWindow, QRubberBand, QSizePolicy

from adapters.qt_render_bridge import QtRenderBridge
from api.explorer_api import ExplorerAPI
from coloring.palettes import palettes
from utils.enums import ColorScheme, FractalKind, Tools


# =============================================================================
# Main Window
# =============================================================================
class FractalViewer(QMainWindow):
    """
    Thin desktop front end. Left drag pans, right drag selects a rectangle to
    zoom into; with the pick tool a left click sets the Julia constant.
    """

    def __init__(self):
        super().__init__()
        self.setWindowTitle("Fractal Explorer")
        self.resize(1000, 700)

        self.bridge = QtRenderBridge(self)
        self.api = ExplorerAPI(width=0, height=0, post=self.bridge.post)
        self.api.on_frame(self.bridge.on_frame)
        self.api.on_log(self.bridge.on_log)
        self.bridge.image_updated.connect(self.update_image)
        self.bridge.log_text.connect(self.log)

        self.tool = Tools.Drag
        self.select_origin: QPoint | None = None

        self.display = QLabel(self)
        self.display.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.display.setSizePolicy(QSizePolicy.Policy.Ignored, QSizePolicy.Policy.Ignored)
        self.display.setMouseTracking(False)
        self.setCentralWidget(self.display)
        self.rubber_band = QRubberBand(QRubberBand.Shape.Rectangle, self.display)

        # Resizes arrive in bursts; render once they settle
        self.resize_timer = QTimer(self)
        self.resize_timer.setSingleShot(True)
        self.resize_timer.setInterval(120)
        self.resize_timer.timeout.connect(self._apply_resize)

        self._build_menus()

    # ---------- Construction & UI wiring ----------
    def _build_menus(self):
        bar = self.menuBar()

        view_menu = bar.addMenu("View")
        self._add_action(view_menu, "Reset View", self.api.reset_view, "Ctrl+R")
        self._add_action(view_menu, "Zoom In", self.api.zoom_in, "Ctrl+=")
        self._add_action(view_menu, "Zoom Out", self.api.zoom_out, "Ctrl+-")
        self._add_action(view_menu, "Undo", self.api.undo, "Ctrl+Z")

        fractal_menu = bar.addMenu("Fractal")
        group = QActionGroup(self)
        for kind in FractalKind:
            act = self._add_action(fractal_menu, f"{kind.name.title()} Set",
                                   lambda k=kind: self.api.set_fractal_type(k))
            act.setCheckable(True)
            act.setChecked(kind == self.api.settings.fractal)
            group.addAction(act)
        fractal_menu.addSeparator()
        pick = self._add_action(fractal_menu, "Pick Julia Constant",
                                lambda: self.set_tool(Tools.Pick_julia))
        pick.setToolTip("Click a point to use it as the Julia constant")

        color_menu = bar.addMenu("Color")
        group = QActionGroup(self)
        for scheme in ColorScheme:
            act = self._add_action(color_menu, scheme.name.title(),
                                   lambda s=scheme: self.api.set_color_scheme(s))
            act.setCheckable(True)
            act.setChecked(scheme == self.api.settings.color_scheme)
            group.addAction(act)
        custom_menu = color_menu.addMenu("Custom Palette")
        for name, colors in palettes.items():
            self._add_action(custom_menu, name, lambda c=colors: self._use_custom_palette(c))

        tour_menu = bar.addMenu("Tour")
        self._add_action(tour_menu, "Add Keyframe", self._add_keyframe, "Ctrl+K")
        self._add_action(tour_menu, "Start Fractal Tour", self._start_tour)
        self._add_action(tour_menu, "Stop Tour", self.api.stop_tour)
        self._add_action(tour_menu, "Clear Keyframes", self.api.clear_keyframes)

    def _add_action(self, menu, text, slot, shortcut=None):
        act = QAction(text, self)
        if shortcut:
            act.setShortcut(shortcut)
        act.triggered.connect(lambda _checked=False: slot())
        menu.addAction(act)
        return act

    def set_tool(self, tool):
        self.tool = tool
        self.log(f"Tool: {tool.name}")

    def _use_custom_palette(self, colors):
        self.api.set_custom_palette(colors)
        self.api.set_color_scheme(ColorScheme.CUSTOM)

    def _add_keyframe(self):
        self.api.add_keyframe()
        self.log(f"Keyframes: {len(self.api.tour.keyframes)}")

    def _start_tour(self):
        if not self.api.start_tour():
            self.log("Add at least two keyframes to start a tour.")

    # ---------- Renderer callbacks ----------
    def update_image(self, image: QImage, render_w: int, render_h: int):
        if (render_w, render_h) != (self.display.width(), self.display.height()):
            image = image.scaled(self.display.size(), Qt.AspectRatioMode.IgnoreAspectRatio,
                                 Qt.TransformationMode.SmoothTransformation)
        self.display.setPixmap(QPixmap.fromImage(image))
        self._update_status()

    def log(self, msg: str):
        self.statusBar().showMessage(msg, 4000)

    def _update_status(self):
        b = self.api.bounds
        self.setWindowTitle(
            f"Fractal Explorer  x=[{b.min_x:.6g}, {b.max_x:.6g}]  "
            f"y=[{b.min_y:.6g}, {b.max_y:.6g}]  max_iter={self.api.max_iterations}")

    # ---------- Input ----------
    def _local(self, event) -> QPoint:
        return self.display.mapFrom(self, event.position().toPoint())

    def mousePressEvent(self, event):
        local = self._local(event)
        if not self.display.rect().contains(local):
            return
        if event.button() == Qt.MouseButton.LeftButton:
            if self.tool == Tools.Pick_julia:
                c = self.api.pick_julia_constant(local.x(), local.y())
                self.log(f"Julia constant: {c}")
                self.tool = Tools.Drag
                return
            self.api.drag_start(local.x(), local.y())
        elif event.button() == Qt.MouseButton.RightButton:
            self.select_origin = local
            self.rubber_band.setGeometry(QRect(local, QSize()))
            self.rubber_band.show()

    def mouseMoveEvent(self, event):
        local = self._local(event)
        if self.select_origin is not None:
            self.rubber_band.setGeometry(QRect(self.select_origin, local).normalized())
        elif event.buttons() & Qt.MouseButton.LeftButton:
            self.api.drag_move(local.x(), local.y())

    def mouseReleaseEvent(self, event):
        local = self._local(event)
        if event.button() == Qt.MouseButton.RightButton and self.select_origin is not None:
            self.rubber_band.hide()
            start = (self.select_origin.x(), self.select_origin.y())
            self.select_origin = None
            self.api.rectangle_select(start, (local.x(), local.y()))
        elif event.button() == Qt.MouseButton.LeftButton:
            self.api.drag_end()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.resize_timer.start()

    def _apply_resize(self):
        w, h = self.display.width(), self.display.height()
        if w > 0 and h > 0:
            self.api.resize(w, h)

    def closeEvent(self, event):
        self.api.shutdown()
        super().closeEvent(event)
