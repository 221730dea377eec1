from PySide6.QtWidgets import (QWidget, QGroupBox, QVBoxLayout, QGridLayout, QLabel,
                               QLineEdit, QComboBox, QCheckBox, QPushButton)
from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtGui import QDoubleValidator

from acidbase.core.constants import DEFAULT_INPUTS_SI
from acidbase.core.enums import IonKey
from acidbase.core.state import NormalizedInputs
from acidbase.core.units import SI, CONVENTIONAL, to_si, to_conventional
from .styles import STYLE_GROUPBOX, STYLE_INPUT, get_button_style

# (field, label, fixed unit, convertible ion key, display decimals)
FIELDS = [
    ("na", "Na⁺", "mmol/L", None, 0),
    ("k", "K⁺", "mmol/L", None, 1),
    ("ica", "iCa²⁺", None, IonKey.ICA, 2),
    ("mg", "Mg²⁺ (ionised)", None, IonKey.MG, 2),
    ("cl", "Cl⁻", "mmol/L", None, 0),
    ("lactate", "Lactate", None, IonKey.LACTATE, 1),
    ("albumin", "Albumin", "g/dL", None, 1),
    ("phosphate", "Phosphate", None, IonKey.PHOSPHATE, 2),
    ("ph", "pH", "", None, 2),
    ("pco2", "pCO₂", "mmHg", None, 0),
    ("hco3", "HCO₃⁻ (measured)", "mmol/L", None, 1),
]


class InputPanel(QWidget):
    """
    Serum panel entry form.

    Blank fields are reported as absent (None), never as 0. Emits `changed`
    after a short debounce so typing does not recompute on every key.
    """
    changed = Signal()
    use_measured_hco3_changed = Signal(bool)
    show_non_si_changed = Signal(bool)

    DEBOUNCE_MS = 150

    def __init__(self, parent=None):
        super().__init__(parent)
        self.edits = {}
        self.unit_boxes = {}
        self._prev_units = {}

        self.debounce = QTimer(self)
        self.debounce.setSingleShot(True)
        self.debounce.setInterval(self.DEBOUNCE_MS)
        self.debounce.timeout.connect(self.changed.emit)

        self.init_ui()
        self.reset_defaults()

    def init_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        gb = QGroupBox("Serum panel")
        gb.setStyleSheet(STYLE_GROUPBOX + STYLE_INPUT)
        grid = QGridLayout(gb)
        grid.setSpacing(8)

        validator = QDoubleValidator(self)
        validator.setNotation(QDoubleValidator.StandardNotation)

        for row, (name, label, unit, key, _decimals) in enumerate(FIELDS):
            grid.addWidget(QLabel(label), row, 0)
            edit = QLineEdit()
            edit.setValidator(validator)
            edit.setAlignment(Qt.AlignRight)
            edit.textEdited.connect(self.schedule_update)
            grid.addWidget(edit, row, 1)
            self.edits[name] = edit

            if key is None:
                grid.addWidget(QLabel(unit), row, 2)
            else:
                box = QComboBox()
                box.addItems([SI, CONVENTIONAL])
                box.currentTextChanged.connect(lambda text, n=name: self._on_unit_changed(n, text))
                grid.addWidget(box, row, 2)
                self.unit_boxes[name] = box
                self._prev_units[name] = SI

        layout.addWidget(gb)

        self.cb_measured_hco3 = QCheckBox("Use measured HCO₃⁻ (chemistry panel)")
        self.cb_measured_hco3.setStyleSheet(STYLE_INPUT)
        self.cb_measured_hco3.toggled.connect(self._on_measured_toggled)
        layout.addWidget(self.cb_measured_hco3)

        self.cb_non_si = QCheckBox("Show conventional units")
        self.cb_non_si.setStyleSheet(STYLE_INPUT)
        self.cb_non_si.toggled.connect(self.show_non_si_changed.emit)
        layout.addWidget(self.cb_non_si)

        self.btn_reset = QPushButton("Reset to defaults")
        self.btn_reset.setStyleSheet(get_button_style())
        self.btn_reset.clicked.connect(self.reset_defaults)
        layout.addWidget(self.btn_reset)
        layout.addStretch()

        self.edits["hco3"].setEnabled(False)

    def schedule_update(self, *_args):
        self.debounce.start()

    def _key_for(self, name):
        for field, _label, _unit, key, _decimals in FIELDS:
            if field == name:
                return key
        return None

    def _decimals_for(self, name):
        for field, _label, _unit, _key, decimals in FIELDS:
            if field == name:
                return decimals
        return 2

    def _read(self, name):
        text = self.edits[name].text().strip().replace(",", ".")
        if not text:
            return None
        try:
            return float(text)
        except ValueError:
            return None

    def _write(self, name, value, decimals=None):
        if value is None:
            self.edits[name].setText("")
            return
        decimals = self._decimals_for(name) if decimals is None else decimals
        self.edits[name].setText(f"{value:.{decimals}f}")

    def _on_unit_changed(self, name, unit):
        """Keep the SI value and redisplay it in the newly selected unit."""
        key = self._key_for(name)
        value = self._read(name)
        si = to_si(value, key, self._prev_units[name])
        self._prev_units[name] = unit
        shown = to_conventional(si, key, unit)
        self._write(name, shown, decimals=2 if unit == SI else 1)
        self.schedule_update()

    def _on_measured_toggled(self, checked):
        self.edits["hco3"].setEnabled(checked)
        self.use_measured_hco3_changed.emit(checked)

    def unit_of(self, name) -> str:
        box = self.unit_boxes.get(name)
        return box.currentText() if box is not None else SI

    def normalized_inputs(self) -> NormalizedInputs:
        """Current fields converted to SI; blank -> None."""
        values = {}
        for name, _label, _unit, key, _decimals in FIELDS:
            value = self._read(name)
            if key is not None:
                value = to_si(value, key, self.unit_of(name))
            values[name] = value
        if not self.cb_measured_hco3.isChecked():
            values["hco3"] = None
        return NormalizedInputs(**values)

    def entered_values(self):
        """Values typed in a non-SI unit, keyed by ion (for tooltips)."""
        entered = {}
        for name, box in self.unit_boxes.items():
            value = self._read(name)
            if value is not None and box.currentText() != SI:
                entered[self._key_for(name)] = (value, box.currentText())
        return entered

    def show_derived_hco3(self, value):
        """Mirror the blood-gas bicarbonate in the read-only HCO3 field."""
        if not self.cb_measured_hco3.isChecked():
            self._write("hco3", value, decimals=2)

    def reset_defaults(self):
        for name, box in self.unit_boxes.items():
            box.blockSignals(True)
            box.setCurrentText(SI)
            box.blockSignals(False)
            self._prev_units[name] = SI
        for name, *_rest in FIELDS:
            self._write(name, DEFAULT_INPUTS_SI.get(name))
        self.schedule_update()
