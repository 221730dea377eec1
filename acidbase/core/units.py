"""
Unit conversion helpers for dual-unit ion display.

Internal convention:
- Ion concentrations and phosphate: mmol/L (SI)
- Gamblegram segments: mEq/L (divalent cations carry 2x their molar value)
- Conventional display: mg/dL for Mg, iCa, Lactate and Phosphate (as P)

Each factor is 10 / MW and converts mg/dL -> mmol/L.
"""

import math
from typing import Dict, Optional

from .constants import (
    MW_MAGNESIUM,
    MW_CALCIUM,
    MW_LACTATE,
    MW_PHOSPHORUS,
    DIVALENT_CHARGE,
)
from .enums import IonKey, DIVALENT_KEYS


SI = "mmol/L"
CONVENTIONAL = "mg/dL"

_CONC_UNIT_ALIASES: Dict[str, str] = {
    "si": SI,
    "mmol/l": SI,
    "mmol": SI,
    "mm": SI,
    "meq/l": SI,
    "mgdl": CONVENTIONAL,
    "mg/dl": CONVENTIONAL,
    "mg%": CONVENTIONAL,
}

# mg/dL -> mmol/L (multiplicative).
CONVERSION_FACTORS: Dict[IonKey, float] = {
    IonKey.MG: 10.0 / MW_MAGNESIUM,
    IonKey.ICA: 10.0 / MW_CALCIUM,
    IonKey.LACTATE: 10.0 / MW_LACTATE,
    IonKey.PHOSPHATE: 10.0 / MW_PHOSPHORUS,
}

# Segments shown in mEq/L when conventional units are requested.
_MEQ_KEYS = (IonKey.NA, IonKey.K, IonKey.CL, IonKey.HCO3)


def normalize_conc_unit(unit: str) -> str:
    """Normalize concentration unit strings to "mmol/L" or "mg/dL"."""
    if not unit:
        return SI
    u = unit.strip().lower().replace(" ", "")
    u = u.replace("per", "/")
    if u not in _CONC_UNIT_ALIASES:
        raise ValueError(f"Unsupported concentration unit: {unit}")
    return _CONC_UNIT_ALIASES[u]


def _factor(key: IonKey, unit: str) -> float:
    norm = normalize_conc_unit(unit)
    if norm == SI:
        return 1.0
    if key not in CONVERSION_FACTORS:
        raise ValueError(f"No {norm} conversion for {key.value}")
    return CONVERSION_FACTORS[key]


def to_si(value: Optional[float], key: IonKey, unit: str) -> Optional[float]:
    """
    Convert an entered value to mmol/L.

    Raises ValueError if the unit is unsupported for this ion.
    """
    factor = _factor(key, unit)
    if value is None:
        return None
    return value * factor


def to_conventional(value_si: Optional[float], key: IonKey, unit: str = CONVENTIONAL) -> Optional[float]:
    """Inverse of to_si."""
    factor = _factor(key, unit)
    if value_si is None:
        return None
    return value_si / factor


def segment_to_conventional(key: IonKey, value_meq: float) -> Optional[float]:
    """
    Convert a Gamblegram segment value back to its conventional unit.

    Divalent segments are charge-doubled, so they are halved before the
    mg/dL conversion. Na/K/Cl/HCO3 are returned unchanged (mEq/L).
    Albumin and Unknown have no conventional counterpart.
    """
    if value_meq is None or not math.isfinite(value_meq):
        return None
    if key in _MEQ_KEYS:
        return value_meq
    if key not in CONVERSION_FACTORS:
        return None
    molar = value_meq / DIVALENT_CHARGE if key in DIVALENT_KEYS else value_meq
    return to_conventional(molar, key)


def format_non_si(key: IonKey, value_meq: float) -> Optional[str]:
    """Tooltip line such as "2.43 mg/dL"; None when there is nothing to show."""
    converted = segment_to_conventional(key, value_meq)
    if converted is None:
        return None
    unit = "mEq/L" if key in _MEQ_KEYS else CONVENTIONAL
    return f"{converted:.2f} {unit}"
