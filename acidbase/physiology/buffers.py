"""
Weak-acid and bicarbonate charge formulas.

Pure functions of their numeric arguments; they accept floats or numpy
arrays and let NaN/inf propagate.

References:
    Figge J, Mydosh T, Fencl V. Serum proteins and acid-base equilibria:
    a follow-up. J Lab Clin Med. 1992;120(5):713-719.
    Figge J. figge-fencl.org model v3.0 (2003-2013).
    Sendroy J Jr, Hastings AB. J Biol Chem. 1927;71:797-823.
"""

import numpy as np

from acidbase.core.constants import (
    CO2_SOLUBILITY,
    HCO3_PKA,
    ALBUMIN_MW_KDA,
    ATOT_ALBUMIN_COEFF,
    ATOT_PHOSPHATE_COEFF,
)
from acidbase.physiology.buffer_config import (
    AlbuminResidueConfig,
    PhosphateConfig,
    LinearBufferConfig,
    ALBUMIN_RESIDUES,
    PHOSPHATE_PKA,
    LINEAR_BUFFERS,
)


def _protonated(ph, pka):
    """Fraction of a basic group carrying its proton (positive charge)."""
    return 1.0 / (1.0 + np.power(10.0, ph - pka))


def _deprotonated(ph, pka):
    """Fraction of an acidic group that has lost its proton (negative charge)."""
    return 1.0 / (1.0 + np.power(10.0, pka - ph))


def bicarbonate_from_blood_gas(ph, pco2):
    """
    Henderson–Hasselbalch: [HCO3-] = 0.03 * pCO2 * 10^(pH - 6.1).

    Args:
        ph: Arterial pH
        pco2: Arterial pCO2 (mmHg)

    Returns:
        [HCO3-] in mmol/L
    """
    with np.errstate(over="ignore", invalid="ignore"):
        return CO2_SOLUBILITY * pco2 * np.power(10.0, ph - HCO3_PKA)


def albumin_charge(albumin_g_per_l, ph, residues: AlbuminResidueConfig = ALBUMIN_RESIDUES):
    """
    Net anionic charge of albumin (A-) from the Figge–Fencl v3.0 model.

    Albumin (MW 66.5 kDa) is treated as a macro-ion with an individual pKa
    for every ionisable residue. Five domain-1 histidines have their pKa
    lowered by up to 0.4 units as the protein moves from the N- to the
    B-form around pH 6.9.

    At pH 7.40 and 40 g/L the result is ~11.15 mEq/L.

    Args:
        albumin_g_per_l: Albumin (g/L)
        ph: Arterial pH

    Returns:
        A- in mEq/L (positive = net negative charge)
    """
    with np.errstate(over="ignore", invalid="ignore"):
        albumin_mmol = albumin_g_per_l / ALBUMIN_MW_KDA

        nb = residues.nb_shift_max * (1.0 - 1.0 / (1.0 + np.power(10.0, ph - residues.nb_midpoint_ph)))

        histidine = sum(_protonated(ph, pka - nb) for pka in residues.histidine_nb)
        histidine = histidine + sum(_protonated(ph, pka) for pka in residues.histidine_fixed)

        basic = sum(count * _protonated(ph, pka) for count, pka in residues.basic_groups())
        acidic = sum(count * _deprotonated(ph, pka) for count, pka in residues.acidic_groups())

        net_per_mol = histidine + basic - acidic
        return -albumin_mmol * net_per_mol


def phosphate_charge(phosphate_mmol, ph, pka: PhosphateConfig = PHOSPHATE_PKA):
    """
    Mean negative charge of inorganic phosphate (Pi-) from the full
    triprotic equilibrium H3PO4 <-> H2PO4- <-> HPO4 2- <-> PO4 3-.

    At pH 7.40 and 1.0 mmol/L the result is ~1.85 mEq/L.

    Args:
        phosphate_mmol: Total phosphate (mmol/L)
        ph: Arterial pH

    Returns:
        Pi- in mEq/L
    """
    with np.errstate(over="ignore", invalid="ignore", under="ignore"):
        k1 = np.power(10.0, -pka.pka1)
        k2 = np.power(10.0, -pka.pka2)
        k3 = np.power(10.0, -pka.pka3)
        h = np.power(10.0, np.negative(ph))

        denominator = h * h * h + k1 * h * h + k1 * k2 * h + k1 * k2 * k3
        z = (k1 * h * h + 2.0 * k1 * k2 * h + 3.0 * k1 * k2 * k3) / denominator
        return phosphate_mmol * z


def albumin_charge_linear(albumin_g_per_l, ph, params: LinearBufferConfig = LINEAR_BUFFERS):
    """Single-pKa approximation: A- = 0.123 * Alb / (1 + 10^(7.08 - pH))."""
    with np.errstate(over="ignore", invalid="ignore"):
        return params.albumin_coeff * albumin_g_per_l * _deprotonated(ph, params.albumin_pka)


def phosphate_charge_linear(phosphate_mmol, ph, params: LinearBufferConfig = LINEAR_BUFFERS):
    """Single-pKa approximation: Pi- = 0.309 * Phos / (1 + 10^(6.8 - pH))."""
    with np.errstate(over="ignore", invalid="ignore"):
        return params.phosphate_coeff * phosphate_mmol * _deprotonated(ph, params.phosphate_pka)


def total_weak_acid(albumin_g_per_l, phosphate_mmol):
    """Atot (mmol/L) = 0.123 * Alb(g/L) + 0.309 * Phos(mmol/L)."""
    return ATOT_ALBUMIN_COEFF * albumin_g_per_l + ATOT_PHOSPHATE_COEFF * phosphate_mmol


ALBUMIN_MODELS = {
    "FiggeFencl3": albumin_charge,
    "Linear": albumin_charge_linear,
}

PHOSPHATE_MODELS = {
    "Triprotic": phosphate_charge,
    "Linear": phosphate_charge_linear,
}


def get_albumin_model(name: str):
    if name not in ALBUMIN_MODELS:
        raise ValueError(f"albumin_model should be one of {sorted(ALBUMIN_MODELS)}, got {name!r}")
    return ALBUMIN_MODELS[name]


def get_phosphate_model(name: str):
    if name not in PHOSPHATE_MODELS:
        raise ValueError(f"phosphate_model should be one of {sorted(PHOSPHATE_MODELS)}, got {name!r}")
    return PHOSPHATE_MODELS[name]
