import pyqtgraph as pg
from PySide6.QtWidgets import QWidget, QVBoxLayout, QToolTip
from PySide6.QtCore import QTimer
from PySide6.QtGui import QFont, QCursor
import numpy as np

from acidbase.core.engine import AcidBaseEngine
from acidbase.core.enums import Side, ION_LABELS
from acidbase.core.stack_builder import GamblegramGeometry
from acidbase.core.units import format_non_si
from .styles import COLORS, GAMBLEGRAM_COLORS, FONTS


class GamblegramWidget(QWidget):
    """
    Cation/anion stacked bars drawn with pyqtgraph.

    The widget only draws: geometry comes from the engine, and a QTimer
    pulls one animation frame per tick until the transition ends.
    """
    FRAME_INTERVAL_MS = 16

    def __init__(self, engine: AcidBaseEngine = None, show_non_si=False):
        super().__init__()
        self.engine = engine or AcidBaseEngine(palette=GAMBLEGRAM_COLORS)
        self.show_non_si = show_non_si
        self.entered_values = {}  # IonKey -> (value, unit) as typed by the user
        self.frame = None
        self.labels = {}

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.plot = pg.PlotWidget()
        self.plot.setBackground(COLORS['background_alt'])
        self.plot.setMouseEnabled(x=False, y=False)
        self.plot.hideAxis('bottom')
        self.plot.hideAxis('left')
        self.plot.setMenuEnabled(False)
        self.plot.hideButtons()
        self.plot.getViewBox().invertY(True)
        self.plot.setAntialiasing(True)
        layout.addWidget(self.plot)

        self.bars = pg.BarGraphItem(x0=np.zeros(0), y0=np.zeros(0), width=1.0, height=np.zeros(0))
        self.plot.addItem(self.bars)
        self._apply_view_range()

        self.plot.scene().sigMouseMoved.connect(self._on_mouse_moved)

        self.timer = QTimer(self)
        self.timer.setInterval(self.FRAME_INTERVAL_MS)
        self.timer.timeout.connect(self.animation_step)

    @property
    def chart_geometry(self) -> GamblegramGeometry:
        return self.engine.geometry

    def _apply_view_range(self):
        g = self.chart_geometry
        self.plot.setXRange(0, g.width, padding=0)
        self.plot.setYRange(0, g.total_height, padding=0)

    def recompute(self, inputs):
        """Run the pipeline for new inputs and start the transition."""
        result = self.engine.update(inputs)
        self._start_animation()
        return result

    def refresh(self):
        result = self.engine.refresh()
        self._start_animation()
        return result

    def _start_animation(self):
        self.draw_frame(self.engine.animator.last_frame)
        if self.engine.is_animating:
            self.timer.start()
        else:
            self.timer.stop()

    def animation_step(self):
        frame = self.engine.tick()
        self.draw_frame(frame)
        if not self.engine.is_animating:
            self.timer.stop()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        width = max(1, self.plot.width())
        if abs(width - self.chart_geometry.width) < 1.0:
            return
        self.engine.set_geometry(GamblegramGeometry.for_width(width))
        self._apply_view_range()
        self._start_animation()

    def draw_frame(self, frame):
        self.frame = frame
        if frame is None:
            return
        g = self.chart_geometry
        x0 = [g.left_x if s.side == Side.CATION else g.right_x for s in frame.segments]
        self.bars.setOpts(
            x0=np.array(x0, dtype=float),
            y0=np.array([s.offset for s in frame.segments], dtype=float),
            width=g.bar_width,
            height=np.array([s.extent for s in frame.segments], dtype=float),
            brushes=[pg.mkBrush(s.color) for s in frame.segments],
            pens=[pg.mkPen(COLORS['background_alt'], width=1) for _ in frame.segments],
        )
        self._sync_labels(frame)

    def _sync_labels(self, frame):
        g = self.chart_geometry
        current = {(s.key, s.side) for s in frame.segments}
        for stale in set(self.labels) - current:
            self.plot.removeItem(self.labels.pop(stale))

        font = QFont(FONTS['family'])
        font.setPixelSize(int(g.font_size))
        for s in frame.segments:
            item = self.labels.get((s.key, s.side))
            if item is None:
                anchor = (1, 0.5) if s.side == Side.CATION else (0, 0.5)
                item = pg.TextItem(color=COLORS['text_secondary'], anchor=anchor)
                self.plot.addItem(item)
                self.labels[(s.key, s.side)] = item
            item.setFont(font)
            item.setText(f"{ION_LABELS[s.key]} {s.value:.2f}")
            if s.side == Side.CATION:
                item.setPos(g.left_x - g.label_margin, s.label_y)
            else:
                item.setPos(g.right_x + g.bar_width + g.label_margin, s.label_y)

    def segment_at(self, x, y):
        """Frame segment under a view coordinate, if any."""
        if self.frame is None:
            return None
        g = self.chart_geometry
        for s in self.frame.segments:
            left = g.left_x if s.side == Side.CATION else g.right_x
            if left <= x <= left + g.bar_width and s.offset <= y <= s.offset + s.extent:
                return s
        return None

    def tooltip_html(self, segment) -> str:
        html = f"<b>{ION_LABELS[segment.key]}</b><br>{segment.value:.2f} mEq/L"
        entered = self.entered_values.get(segment.key)
        if entered is not None:
            value, unit = entered
            html += f"<br><span style='color:{COLORS['text_dim']}'>{value:.2f} {unit} (entered)</span>"
        if self.show_non_si:
            non_si = format_non_si(segment.key, segment.value)
            if non_si:
                html += f"<br><span style='color:{COLORS['text_dim']}'>≈ {non_si}</span>"
        return html

    def _on_mouse_moved(self, pos):
        point = self.plot.getViewBox().mapSceneToView(pos)
        segment = self.segment_at(point.x(), point.y())
        if segment is None:
            QToolTip.hideText()
            return
        QToolTip.showText(QCursor.pos(), self.tooltip_html(segment), self)
