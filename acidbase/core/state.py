from dataclasses import dataclass, field, fields
from typing import Dict, Mapping, Optional, Tuple

from .constants import SID_DISPLAY_DIGITS, ANION_GAP_DISPLAY_DIGITS
from .enums import IonKey, Side, HCO3Source, ION_LABELS
from .utils import round_half_up


# Mapping aliases accepted by NormalizedInputs.from_mapping (lower-cased).
_INPUT_ALIASES = {
    "na": "na",
    "k": "k",
    "ica": "ica",
    "mg": "mg",
    "cl": "cl",
    "lac": "lactate",
    "lactate": "lactate",
    "alb": "albumin",
    "albumin": "albumin",
    "phos": "phosphate",
    "phosphate": "phosphate",
    "ph": "ph",
    "pco2": "pco2",
    "hco3": "hco3",
}


@dataclass
class AnalysisConfig:
    """Per-session switches for the calculator."""
    use_measured_hco3: bool = False
    show_non_si: bool = False

    # Model selections.
    albumin_model: str = "FiggeFencl3"
    phosphate_model: str = "Triprotic"


@dataclass
class NormalizedInputs:
    """
    Serum panel already normalized to SI.

    Ions and phosphate in mmol/L, albumin in g/dL, pCO2 in mmHg.
    None means "not entered" and is kept distinct from 0.0.
    """
    na: Optional[float] = None
    k: Optional[float] = None
    ica: Optional[float] = None
    mg: Optional[float] = None
    cl: Optional[float] = None
    lactate: Optional[float] = None
    albumin: Optional[float] = None
    phosphate: Optional[float] = None
    ph: Optional[float] = None
    pco2: Optional[float] = None
    hco3: Optional[float] = None  # measured (chemistry panel) bicarbonate

    @classmethod
    def from_mapping(cls, values: Mapping[str, Optional[float]]) -> "NormalizedInputs":
        """Build inputs from a name -> value mapping ("Na", "iCa", "pCO2", "lac", ...)."""
        kwargs = {}
        for name, value in values.items():
            attr = _INPUT_ALIASES.get(str(name).strip().lower())
            if attr is None:
                raise ValueError(f"Unknown input: {name}")
            kwargs[attr] = None if value is None else float(value)
        return cls(**kwargs)

    def as_dict(self) -> Dict[str, Optional[float]]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def present(self, name: str) -> bool:
        return getattr(self, name) is not None

    def value_or_zero(self, name: str) -> float:
        """Summation view: absent counts as 0, NaN is passed through."""
        value = getattr(self, name)
        return 0.0 if value is None else value


@dataclass(frozen=True)
class AggregateResult:
    """Stewart aggregates for one panel (mEq/L unless noted)."""
    sida: float
    side: float
    sig: float
    anion_gap: float
    albumin_charge: float
    phosphate_charge: float
    effective_hco3: float
    hco3_source: HCO3Source = HCO3Source.ABSENT
    hco3_from_gas: Optional[float] = None
    atot: float = 0.0  # mmol/L

    @property
    def sida_rounded(self) -> float:
        return round_half_up(self.sida, SID_DISPLAY_DIGITS)

    @property
    def side_rounded(self) -> float:
        return round_half_up(self.side, SID_DISPLAY_DIGITS)

    @property
    def sig_rounded(self) -> float:
        return round_half_up(self.sig, SID_DISPLAY_DIGITS)

    @property
    def anion_gap_rounded(self) -> float:
        return round(self.anion_gap, ANION_GAP_DISPLAY_DIGITS)

    @property
    def effective_hco3_display(self) -> Optional[float]:
        """Bicarbonate for redisplay; None when nothing was available."""
        if self.hco3_source == HCO3Source.ABSENT:
            return None
        return self.effective_hco3


@dataclass(frozen=True)
class IonSegment:
    key: IonKey
    value: float  # mEq/L
    color: str = ""  # opaque token; the presentation layer resolves it

    @property
    def is_unknown(self) -> bool:
        return self.key == IonKey.UNKNOWN

    @property
    def label(self) -> str:
        return ION_LABELS[self.key]


@dataclass(frozen=True)
class PlacedSegment:
    """Segment with its target geometry (y grows downward)."""
    segment: IonSegment
    offset: float  # top edge
    extent: float  # height

    @property
    def key(self) -> IonKey:
        return self.segment.key

    @property
    def value(self) -> float:
        return self.segment.value


@dataclass(frozen=True)
class GamblegramLayout:
    cations: Tuple[PlacedSegment, ...]
    anions: Tuple[PlacedSegment, ...]
    total_cations: float
    total_anions: float
    max_stack: float
    baseline: float
    sig: float  # rounded SIG used to place the Unknown segment

    def column(self, side: Side) -> Tuple[PlacedSegment, ...]:
        return self.cations if side == Side.CATION else self.anions

    def columns(self):
        yield Side.CATION, self.cations
        yield Side.ANION, self.anions


@dataclass(frozen=True)
class SegmentGeometry:
    offset: float
    extent: float


@dataclass
class RenderState:
    """
    Last drawn geometry per ion key, one instance per visualization surface.

    Keys without a counterpart in the next layout are simply never read.
    """
    geometry: Dict[IonKey, SegmentGeometry] = field(default_factory=dict)

    def lookup(self, key: IonKey) -> Optional[SegmentGeometry]:
        return self.geometry.get(key)

    def persist(self, geometry: Mapping[IonKey, SegmentGeometry]):
        self.geometry.update(geometry)


@dataclass(slots=True)
class SegmentFrame:
    """Interpolated geometry of one segment for a single animation frame."""
    key: IonKey
    side: Side
    value: float
    color: str
    offset: float
    extent: float
    label_y: float


@dataclass(slots=True)
class Frame:
    """Snapshot of the Gamblegram at one point of the tween."""
    progress: float = 1.0
    segments: Tuple[SegmentFrame, ...] = ()

    @property
    def finished(self) -> bool:
        return self.progress >= 1.0

    def column(self, side: Side) -> Tuple[SegmentFrame, ...]:
        return tuple(s for s in self.segments if s.side == side)
