"""
Chemistry and layout constants for the Stewart / Gamblegram core.

This module centralizes magic numbers used throughout the calculator.

NOTE: Only add constants here that are ACTIVELY IMPORTED elsewhere.
"""

from dataclasses import dataclass

# Henderson–Hasselbalch (used in buffers.py).

# CO2 solubility coefficient (mmol/L per mmHg) at 37°C
CO2_SOLUBILITY = 0.03
# Apparent pKa of the CO2/HCO3- system in plasma
HCO3_PKA = 6.1

# Albumin (used in buffers.py, aggregator.py).

# Molecular weight of human serum albumin (g/mmol == kDa)
ALBUMIN_MW_KDA = 66.5
# g/dL -> g/L
ALBUMIN_G_DL_TO_G_L = 10.0

# Total weak acid (Atot) coefficients, Figge/Fencl linear approximation.
ATOT_ALBUMIN_COEFF = 0.123  # mmol per g of albumin
ATOT_PHOSPHATE_COEFF = 0.309  # mmol per mmol of phosphate

# Molecular weights (g/mol) for the conventional-unit conversions (units.py).
# Reference: IUPAC standard atomic weights; lactate as C3H5O3-.
MW_MAGNESIUM = 24.305
MW_CALCIUM = 40.08
MW_LACTATE = 89.07
MW_PHOSPHORUS = 30.97

# Charge per mole for divalent cations (mmol/L -> mEq/L).
DIVALENT_CHARGE = 2.0

# Stack construction (used in stack_builder.py).

# |SIG| below this creates no "Unknown" segment
SIG_EPSILON = 1e-4

# Floor for max_stack so an all-absent panel never divides by zero
MAX_STACK_FLOOR = 1.0

# Display rounding (digits).
SID_DISPLAY_DIGITS = 1
ANION_GAP_DISPLAY_DIGITS = 2

# Typical adult values (SI; albumin g/dL). Ionised Mg ≈ 60 % of total serum Mg.
DEFAULT_INPUTS_SI = {
    "na": 140.0,
    "k": 4.0,
    "ica": 1.20,
    "mg": 0.50,
    "cl": 104.0,
    "lactate": 1.0,
    "albumin": 4.0,
    "phosphate": 1.0,
    "ph": 7.40,
    "pco2": 40.0,
    "hco3": 24.0,
}


@dataclass(frozen=True)
class AnimationTuning:
    """Tween parameters for the Gamblegram transition."""
    # Duration of one transition (ms)
    duration: float = 360.0

    # Start geometry for segments that have never been drawn
    new_segment_extent: float = 8.0

    # Prior extents are floored at this value when seeding a tween
    min_start_extent: float = 4.0

    # Drawn extents never collapse below this
    min_render_extent: float = 1.0
