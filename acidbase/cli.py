import argparse
import json
import logging
import sys

from acidbase.core.aggregator import format_results
from acidbase.core.constants import DEFAULT_INPUTS_SI
from acidbase.core.engine import AcidBaseEngine
from acidbase.core.enums import IonKey, Side
from acidbase.core.stack_builder import unknown_caption
from acidbase.core.state import AnalysisConfig, NormalizedInputs
from acidbase.core.units import to_si, format_non_si

logger = logging.getLogger(__name__)

# (argument, input field, convertible ion key)
PANEL_ARGS = (
    ("na", "na", None),
    ("k", "k", None),
    ("ica", "ica", IonKey.ICA),
    ("mg", "mg", IonKey.MG),
    ("cl", "cl", None),
    ("lactate", "lactate", IonKey.LACTATE),
    ("albumin", "albumin", None),
    ("phosphate", "phosphate", IonKey.PHOSPHATE),
    ("ph", "ph", None),
    ("pco2", "pco2", None),
    ("hco3", "hco3", None),
)


def build_inputs(args) -> NormalizedInputs:
    """
    Collect panel arguments into SI inputs.

    Raises ValueError for an unsupported unit.
    """
    values = {}
    for arg, field, key in PANEL_ARGS:
        value = getattr(args, arg)
        if value is None and args.defaults:
            value = DEFAULT_INPUTS_SI.get(field)
        elif value is not None and key is not None:
            value = to_si(value, key, getattr(args, f"{arg}_unit"))
        values[field] = value
    return NormalizedInputs(**values)


def layout_to_dict(layout, show_non_si=False) -> dict:
    def column(segments):
        rows = []
        for placed in segments:
            row = {
                "key": placed.key.value,
                "value": placed.value,
                "offset": placed.offset,
                "extent": placed.extent,
            }
            if show_non_si:
                row["conventional"] = format_non_si(placed.key, placed.value)
            rows.append(row)
        return rows

    return {
        "cations": column(layout.cations),
        "anions": column(layout.anions),
        "total_cations": layout.total_cations,
        "total_anions": layout.total_anions,
        "max_stack": layout.max_stack,
    }


def run_headless(args):
    """Compute one panel and print the results."""
    try:
        inputs = build_inputs(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    logger.debug("Headless inputs: %s", inputs.as_dict())

    config = AnalysisConfig(
        use_measured_hco3=args.use_measured_hco3,
        show_non_si=args.show_non_si,
        albumin_model=args.albumin_model,
        phosphate_model=args.phosphate_model,
    )
    engine = AcidBaseEngine(config)
    result = engine.update(inputs)
    engine.finish_animation()
    layout = engine.get_latest_layout()

    if args.json:
        payload = {
            "inputs": inputs.as_dict(),
            "results": {
                "sida": result.sida,
                "side": result.side,
                "sig": result.sig,
                "anion_gap": result.anion_gap,
                "albumin_charge": result.albumin_charge,
                "phosphate_charge": result.phosphate_charge,
                "effective_hco3": result.effective_hco3_display,
                "hco3_source": result.hco3_source.value,
                "atot": result.atot,
            },
            "gamblegram": layout_to_dict(layout, config.show_non_si),
        }
        print(json.dumps(payload, indent=2))
        return

    for name, text in format_results(result).items():
        print(f"{name:>5}: {text}")
    print(unknown_caption(layout.sig))
    for title, side in (("Cations", Side.CATION), ("Anions", Side.ANION)):
        print(f"{title}:")
        for placed in layout.column(side):
            line = f"  {placed.segment.label:<10} {placed.value:8.2f} mEq/L"
            if config.show_non_si:
                non_si = format_non_si(placed.key, placed.value)
                if non_si and not non_si.endswith("mEq/L"):
                    line += f"  (≈ {non_si})"
            print(line)


def run_ui():
    """Run the calculator window."""
    from PySide6.QtWidgets import QApplication
    from acidbase.ui.main_window import MainWindow

    app = QApplication.instance()
    if not app:
        app = QApplication(sys.argv)

    window = MainWindow()
    window.show()
    sys.exit(app.exec())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Stewart acid-base calculator with Gamblegram")
    parser.add_argument("--mode", choices=["ui", "headless"], default="ui", help="Run mode (default: ui)")
    parser.add_argument("--na", type=float, help="Sodium (mmol/L)")
    parser.add_argument("--k", type=float, help="Potassium (mmol/L)")
    parser.add_argument("--ica", type=float, help="Ionised calcium")
    parser.add_argument("--mg", type=float, help="Ionised magnesium")
    parser.add_argument("--cl", type=float, help="Chloride (mmol/L)")
    parser.add_argument("--lactate", type=float, help="Lactate")
    parser.add_argument("--albumin", type=float, help="Albumin (g/dL)")
    parser.add_argument("--phosphate", type=float, help="Phosphate")
    parser.add_argument("--ph", type=float, help="Arterial pH")
    parser.add_argument("--pco2", type=float, help="Arterial pCO2 (mmHg)")
    parser.add_argument("--hco3", type=float, help="Measured bicarbonate (mmol/L)")
    for arg in ("ica", "mg", "lactate", "phosphate"):
        parser.add_argument(f"--{arg}-unit", default="mmol/L", help=f"Unit of --{arg} (mmol/L or mg/dL)")
    parser.add_argument("--use-measured-hco3", action="store_true", help="Use --hco3 instead of the blood-gas value")
    parser.add_argument("--show-non-si", action="store_true", help="Also show conventional units")
    parser.add_argument("--defaults", action="store_true", help="Fill missing values with typical adult values")
    parser.add_argument("--albumin-model", choices=["FiggeFencl3", "Linear"], default="FiggeFencl3")
    parser.add_argument("--phosphate-model", choices=["Triprotic", "Linear"], default="Triprotic")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text (headless only)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.mode == "headless":
        run_headless(args)
    else:
        run_ui()

if __name__ == "__main__":
    main()
