import sys
from PySide6.QtWidgets import (
    QApplication,
    QMainWindow,
    QWidget,
    QHBoxLayout,
    QVBoxLayout,
    QGridLayout,
    QLabel,
    QFrame,
)

from acidbase.core.aggregator import format_results
from acidbase.core.engine import AcidBaseEngine
from acidbase.core.enums import ION_LABELS
from acidbase.core.stack_builder import legend_items, unknown_caption
from acidbase.core.state import AnalysisConfig
from acidbase.ui.gamblegram_widget import GamblegramWidget
from acidbase.ui.input_panel import InputPanel
from acidbase.ui.styles import (
    COLORS,
    FONTS,
    GAMBLEGRAM_COLORS,
    get_base_widget_style,
    get_frame_style,
)

RESULT_ROWS = ("SIDa", "SIDe", "SIG", "AG", "HCO3", "A-", "Pi-", "Atot")


class MainWindow(QMainWindow):
    """Main window: input panel (left), results and Gamblegram (right)."""
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Stewart Acid-Base Calculator")
        self.resize(1200, 900)

        self.setStyleSheet(get_base_widget_style())

        self.engine = AcidBaseEngine(AnalysisConfig(), palette=GAMBLEGRAM_COLORS)
        self.setup_ui()

        self.panel.changed.connect(self.recompute)
        self.panel.use_measured_hco3_changed.connect(self.on_use_measured_hco3)
        self.panel.show_non_si_changed.connect(self.on_show_non_si)
        self.recompute()

    def setup_ui(self):
        central = QWidget()
        self.setCentralWidget(central)

        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(12, 12, 12, 12)
        main_layout.setSpacing(12)

        self.panel = InputPanel()
        main_layout.addWidget(self.panel, stretch=30)

        right = QVBoxLayout()
        right.setSpacing(8)
        main_layout.addLayout(right, stretch=70)

        results = QFrame()
        results.setStyleSheet(get_frame_style(bg_color=COLORS['card']))
        grid = QGridLayout(results)
        grid.setContentsMargins(12, 8, 12, 8)
        self.result_labels = {}
        for i, name in enumerate(RESULT_ROWS):
            lbl_name = QLabel(name)
            lbl_name.setStyleSheet(f"color: {COLORS['text_dim']}; font-size: {FONTS['size_small']}; border: none;")
            lbl_val = QLabel("--")
            lbl_val.setStyleSheet(f"color: {COLORS['text']}; font-size: {FONTS['size_title']}; font-weight: 700; border: none;")
            grid.addWidget(lbl_name, 0, i)
            grid.addWidget(lbl_val, 1, i)
            self.result_labels[name] = lbl_val
        right.addWidget(results)

        self.gamblegram = GamblegramWidget(self.engine)
        right.addWidget(self.gamblegram, stretch=1)

        self.lbl_unknown = QLabel("Unknown: none")
        self.lbl_unknown.setStyleSheet(f"color: {COLORS['text_secondary']}; font-size: {FONTS['size_medium']};")
        right.addWidget(self.lbl_unknown)

        self.lbl_legend = QLabel("")
        self.lbl_legend.setWordWrap(True)
        right.addWidget(self.lbl_legend)

    def recompute(self):
        inputs = self.panel.normalized_inputs()
        self.gamblegram.entered_values = self.panel.entered_values()
        result = self.gamblegram.recompute(inputs)

        for name, text in format_results(result).items():
            self.result_labels[name].setText(text)
        self.panel.show_derived_hco3(result.hco3_from_gas)

        layout = self.engine.get_latest_layout()
        self.lbl_unknown.setText(unknown_caption(layout.sig))
        self.lbl_legend.setText("   ".join(
            f"<span style='color:{color}'>■</span> {ION_LABELS[key]} {value:.2f} mEq/L"
            for key, value, color in legend_items(layout)
        ))

    def on_use_measured_hco3(self, checked: bool):
        # The panel's HCO3 input changes as well; rerun the whole pipeline.
        self.engine.config.use_measured_hco3 = checked
        self.recompute()

    def on_show_non_si(self, checked: bool):
        self.engine.config.show_non_si = checked
        self.gamblegram.show_non_si = checked


def main():
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
