"""
Stewart aggregation: SIDa, SIDe, SIG and anion gap from a normalized panel.

Absent inputs are excluded from the charge sums (they count as 0 only at
the summation boundary); NaN/inf inputs propagate into every aggregate
that depends on them.
"""

from typing import Dict, Optional, Tuple

from .constants import ALBUMIN_G_DL_TO_G_L, DIVALENT_CHARGE
from .enums import HCO3Source
from .state import AggregateResult, AnalysisConfig, NormalizedInputs
from acidbase.physiology.buffers import (
    bicarbonate_from_blood_gas,
    get_albumin_model,
    get_phosphate_model,
    total_weak_acid,
)


def divalent_charges(inputs: NormalizedInputs) -> Tuple[float, float]:
    """
    Charge equivalents (mEq/L) of ionised calcium and magnesium.

    This is the single place where divalent cations are doubled.
    """
    return (
        DIVALENT_CHARGE * inputs.value_or_zero("ica"),
        DIVALENT_CHARGE * inputs.value_or_zero("mg"),
    )


def select_bicarbonate(
    inputs: NormalizedInputs, config: AnalysisConfig
) -> Tuple[float, HCO3Source, Optional[float]]:
    """
    Pick the bicarbonate used in SIDe and the anion gap.

    Returns:
        Tuple of (effective_hco3, source, hco3_from_gas)
    """
    hco3_from_gas = None
    if inputs.present("ph") and inputs.present("pco2"):
        hco3_from_gas = float(bicarbonate_from_blood_gas(inputs.ph, inputs.pco2))

    if config.use_measured_hco3 and inputs.present("hco3"):
        return inputs.hco3, HCO3Source.MEASURED, hco3_from_gas
    if hco3_from_gas is not None:
        return hco3_from_gas, HCO3Source.BLOOD_GAS, hco3_from_gas
    return 0.0, HCO3Source.ABSENT, None


def aggregate(inputs: NormalizedInputs, config: Optional[AnalysisConfig] = None) -> AggregateResult:
    """
    Run the Stewart calculations for one panel.

    Args:
        inputs: Panel in SI units (albumin in g/dL)
        config: Bicarbonate source and buffer model selection

    Returns:
        AggregateResult with unrounded values (SIG == SIDa - SIDe exactly)
    """
    config = config or AnalysisConfig()
    albumin_model = get_albumin_model(config.albumin_model)
    phosphate_model = get_phosphate_model(config.phosphate_model)

    hco3, source, hco3_from_gas = select_bicarbonate(inputs, config)

    na = inputs.value_or_zero("na")
    k = inputs.value_or_zero("k")
    cl = inputs.value_or_zero("cl")
    lactate = inputs.value_or_zero("lactate")
    ica_meq, mg_meq = divalent_charges(inputs)

    sida = na + k + ica_meq + mg_meq - cl - lactate

    albumin_g_l = None
    if inputs.present("albumin"):
        albumin_g_l = inputs.albumin * ALBUMIN_G_DL_TO_G_L

    albumin_charge = 0.0
    if albumin_g_l is not None and inputs.present("ph"):
        albumin_charge = float(albumin_model(albumin_g_l, inputs.ph))

    phosphate_charge = 0.0
    if inputs.present("phosphate") and inputs.present("ph"):
        phosphate_charge = float(phosphate_model(inputs.phosphate, inputs.ph))

    side = hco3 + albumin_charge + phosphate_charge
    sig = sida - side
    anion_gap = na + k - (cl + hco3)

    atot = float(total_weak_acid(
        albumin_g_l if albumin_g_l is not None else 0.0,
        inputs.value_or_zero("phosphate"),
    ))

    return AggregateResult(
        sida=sida,
        side=side,
        sig=sig,
        anion_gap=anion_gap,
        albumin_charge=albumin_charge,
        phosphate_charge=phosphate_charge,
        effective_hco3=hco3,
        hco3_source=source,
        hco3_from_gas=hco3_from_gas,
        atot=atot,
    )


def format_results(result: AggregateResult) -> Dict[str, str]:
    """Rows of the textual results panel."""
    hco3 = result.effective_hco3_display
    return {
        "SIDa": f"{result.sida_rounded:.1f} mEq/L",
        "SIDe": f"{result.side_rounded:.1f} mEq/L",
        "SIG": f"{result.sig_rounded:.1f} mEq/L",
        "AG": f"{result.anion_gap_rounded:.2f} mEq/L",
        "HCO3": f"{hco3:.2f} mmol/L ({result.hco3_source.value})" if hco3 is not None else "—",
        "A-": f"{result.albumin_charge:.3f} mEq/L",
        "Pi-": f"{result.phosphate_charge:.3f} mEq/L",
        "Atot": f"{result.atot:.3f} mmol/L",
    }
