import os
import sys
import unittest

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

pytest.importorskip("PySide6")
pytest.importorskip("pyqtgraph")

from PySide6.QtWidgets import QApplication

from acidbase.core.engine import AcidBaseEngine
from acidbase.core.enums import HCO3Source, IonKey, Side
from acidbase.ui.gamblegram_widget import GamblegramWidget
from acidbase.ui.input_panel import InputPanel
from acidbase.ui.main_window import MainWindow
from acidbase.ui.styles import GAMBLEGRAM_COLORS, get_rgba, hex_to_rgb


# Helper to get QApp
def get_qapp():
    app = QApplication.instance()
    if not app:
        app = QApplication(sys.argv)
    return app


class TestInputPanel(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = get_qapp()

    def setUp(self):
        self.panel = InputPanel()

    def test_defaults(self):
        inputs = self.panel.normalized_inputs()
        self.assertEqual(inputs.na, 140.0)
        self.assertAlmostEqual(inputs.ica, 1.2)
        self.assertIsNone(inputs.hco3)  # measured HCO3 disabled by default

    def test_blank_is_absent(self):
        self.panel.edits["lactate"].setText("")
        self.assertIsNone(self.panel.normalized_inputs().lactate)
        self.panel.edits["lactate"].setText("0")
        self.assertEqual(self.panel.normalized_inputs().lactate, 0.0)

    def test_unit_switch_keeps_si_value(self):
        self.panel.unit_boxes["mg"].setCurrentText("mg/dL")
        self.assertEqual(self.panel.edits["mg"].text(), "1.2")
        self.assertAlmostEqual(self.panel.normalized_inputs().mg, 0.5, delta=0.01)
        entered = self.panel.entered_values()
        self.assertIn(IonKey.MG, entered)

    def test_measured_hco3(self):
        self.panel.cb_measured_hco3.setChecked(True)
        self.assertEqual(self.panel.normalized_inputs().hco3, 24.0)


class TestGamblegramWidget(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = get_qapp()

    def setUp(self):
        self.widget = GamblegramWidget(AcidBaseEngine(palette=GAMBLEGRAM_COLORS))
        self.panel = InputPanel()

    def test_recompute_draws_frame(self):
        result = self.widget.recompute(self.panel.normalized_inputs())
        self.assertEqual(result.sig_rounded, 5.5)
        self.assertIsNotNone(self.widget.frame)
        self.assertTrue(self.widget.timer.isActive())

        self.widget.engine.finish_animation()
        self.widget.animation_step()
        self.assertFalse(self.widget.timer.isActive())
        self.assertIn((IonKey.UNKNOWN, Side.ANION), self.widget.labels)

    def test_hit_test_and_tooltip(self):
        self.widget.recompute(self.panel.normalized_inputs())
        self.widget.draw_frame(self.widget.engine.finish_animation())
        g = self.widget.chart_geometry
        na = [s for s in self.widget.frame.segments if s.key == IonKey.NA][0]
        hit = self.widget.segment_at(g.left_x + 1, na.offset + na.extent / 2)
        self.assertEqual(hit.key, IonKey.NA)
        self.assertIsNone(self.widget.segment_at(-10, -10))

        self.widget.show_non_si = True
        mg = [s for s in self.widget.frame.segments if s.key == IonKey.MG][0]
        self.assertIn("mg/dL", self.widget.tooltip_html(mg))


class TestMainWindow(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = get_qapp()

    def test_results_panel(self):
        window = MainWindow()
        self.assertEqual(window.result_labels["SIDa"].text(), "42.4 mEq/L")
        self.assertEqual(window.result_labels["SIG"].text(), "5.5 mEq/L")
        self.assertEqual(window.lbl_unknown.text(), "Unknown anions: 5.5 mEq/L")

    def test_measured_toggle(self):
        window = MainWindow()
        window.panel.cb_measured_hco3.setChecked(True)
        self.assertTrue(window.engine.config.use_measured_hco3)
        self.assertEqual(window.engine.get_latest_result().hco3_source, HCO3Source.MEASURED)

        window.panel.cb_non_si.setChecked(True)
        self.assertTrue(window.engine.config.show_non_si)
        self.assertTrue(window.gamblegram.show_non_si)


def test_color_helpers():
    assert hex_to_rgb("#B347FF") == "179, 71, 255"
    assert get_rgba("#000000", 0.5) == "rgba(0, 0, 0, 0.5)"
