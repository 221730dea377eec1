"""
Gamblegram stack construction.

Turns an AggregateResult into two ordered, proportionally sized columns
(cations left, anions right). Coordinates are screen-like: y grows
downward and every column stacks upward from a shared baseline.
"""

from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple

from .aggregator import divalent_charges
from .constants import SIG_EPSILON, MAX_STACK_FLOOR
from .enums import IonKey, Side
from .state import AggregateResult, GamblegramLayout, IonSegment, NormalizedInputs, PlacedSegment
from .utils import clamp


@dataclass(frozen=True)
class GamblegramGeometry:
    """Resolved drawing area supplied by the presentation layer."""
    width: float = 480.0
    available_height: float = 624.0
    pad_top: float = 19.0
    font_size: float = 12.0
    bar_fraction: float = 0.38
    min_segment: float = 10.0
    label_spacing: float = 2.0
    label_margin: float = 12.0
    label_height_factor: float = 1.2  # label box height per unit of font size

    @classmethod
    def for_width(cls, width: float, mobile: bool = False, canvas_height: Optional[float] = None):
        """
        Responsive sizing: desktop derives the chart height from the width,
        mobile fills the canvas height when one is known.
        """
        w = max(300.0, float(width))
        if mobile and canvas_height:
            pad_top = max(12.0, round(min(w * 0.06, canvas_height * 0.08)))
            available = max(180.0, canvas_height - 28.0)
            height = max(140.0, round(available - pad_top - 12.0))
        else:
            pad_top = max(12.0, round(w * 0.04))
            height = round(w * 1.3)
        return cls(
            width=w,
            available_height=float(height),
            pad_top=float(pad_top),
            font_size=clamp(round(w * 0.018), 12.0, 24.0),
            bar_fraction=0.28 if mobile else 0.38,
        )

    @property
    def baseline(self) -> float:
        return self.pad_top + self.available_height

    @property
    def bar_width(self) -> float:
        return float(round(max(40.0, self.width * self.bar_fraction)))

    @property
    def gap(self) -> float:
        return float(max(8, round(self.width * 0.02)))

    @property
    def left_x(self) -> float:
        return float(round((self.width - (2 * self.bar_width + self.gap)) / 2))

    @property
    def right_x(self) -> float:
        return self.left_x + self.bar_width + self.gap

    @property
    def label_height(self) -> float:
        return self.font_size * self.label_height_factor

    @property
    def total_height(self) -> float:
        return self.available_height + self.pad_top + 40.0


def _color(palette: Optional[Mapping[IonKey, str]], key: IonKey) -> str:
    if palette and key in palette:
        return palette[key]
    return key.value


def raw_columns(
    result: AggregateResult,
    inputs: NormalizedInputs,
    palette: Optional[Mapping[IonKey, str]] = None,
) -> Tuple[List[IonSegment], List[IonSegment]]:
    """Unordered cation and anion segments, Unknown not yet included."""
    ica_meq, mg_meq = divalent_charges(inputs)
    cations = [
        (IonKey.NA, inputs.value_or_zero("na")),
        (IonKey.K, inputs.value_or_zero("k")),
        (IonKey.ICA, ica_meq),
        (IonKey.MG, mg_meq),
    ]
    anions = [
        (IonKey.CL, inputs.value_or_zero("cl")),
        (IonKey.LACTATE, inputs.value_or_zero("lactate")),
        (IonKey.HCO3, result.effective_hco3),
        (IonKey.ALBUMIN, result.albumin_charge),
        (IonKey.PHOSPHATE, result.phosphate_charge),
    ]
    return (
        [IonSegment(k, v, _color(palette, k)) for k, v in cations],
        [IonSegment(k, v, _color(palette, k)) for k, v in anions],
    )


def unknown_segment(sig_rounded: float, palette=None) -> Tuple[Optional[Side], Optional[IonSegment]]:
    """
    Unknown (unmeasured ion) segment for a rounded SIG.

    Positive SIG -> unmeasured anions, negative -> unmeasured cations,
    inside the epsilon band -> no segment.
    """
    color = _color(palette, IonKey.UNKNOWN)
    if sig_rounded > SIG_EPSILON:
        return Side.ANION, IonSegment(IonKey.UNKNOWN, sig_rounded, color)
    if sig_rounded < -SIG_EPSILON:
        return Side.CATION, IonSegment(IonKey.UNKNOWN, abs(sig_rounded), color)
    return None, None


def order_column(segments: Sequence[IonSegment]) -> List[IonSegment]:
    """Largest first; the Unknown segment always goes last (drawn on top)."""
    known = sorted((s for s in segments if not s.is_unknown), key=lambda s: s.value, reverse=True)
    unknown = [s for s in segments if s.is_unknown]
    return known + unknown


def place_column(
    segments: Sequence[IonSegment], max_stack: float, geometry: GamblegramGeometry
) -> Tuple[PlacedSegment, ...]:
    """Stack segments upward from the baseline, largest closest to it."""
    placed = []
    y = geometry.baseline
    for seg in segments:
        extent = max(geometry.min_segment, seg.value / max_stack * geometry.available_height)
        y -= extent
        placed.append(PlacedSegment(seg, y, extent))
    return tuple(placed)


def build_stacks(
    result: AggregateResult,
    inputs: NormalizedInputs,
    geometry: Optional[GamblegramGeometry] = None,
    palette: Optional[Mapping[IonKey, str]] = None,
) -> GamblegramLayout:
    """
    Build both Gamblegram columns with their target geometry.

    The Unknown segment uses the display-rounded SIG so the bar does not
    flicker on sub-decimal changes.
    """
    geometry = geometry or GamblegramGeometry()
    cations, anions = raw_columns(result, inputs, palette)

    sig = result.sig_rounded
    side, unknown = unknown_segment(sig, palette)
    if side == Side.ANION:
        anions.append(unknown)
    elif side == Side.CATION:
        cations.append(unknown)

    cations = order_column(cations)
    anions = order_column(anions)

    total_cations = sum(s.value for s in cations)
    total_anions = sum(s.value for s in anions)
    max_stack = max(total_cations, total_anions, MAX_STACK_FLOOR)

    return GamblegramLayout(
        cations=place_column(cations, max_stack, geometry),
        anions=place_column(anions, max_stack, geometry),
        total_cations=total_cations,
        total_anions=total_anions,
        max_stack=max_stack,
        baseline=geometry.baseline,
        sig=sig,
    )


def unknown_caption(sig_rounded: float) -> str:
    if sig_rounded > SIG_EPSILON:
        return f"Unknown anions: {sig_rounded:.1f} mEq/L"
    if sig_rounded < -SIG_EPSILON:
        return f"Unknown cations: {abs(sig_rounded):.1f} mEq/L"
    return "Unknown: none"


def legend_items(layout: GamblegramLayout) -> List[Tuple[IonKey, float, str]]:
    """(key, value, color) for the legend, anions first, each key once."""
    seen = set()
    items = []
    for placed in layout.anions + layout.cations:
        if placed.key in seen:
            continue
        seen.add(placed.key)
        items.append((placed.key, placed.value, placed.segment.color))
    return items
