from enum import Enum


class IonKey(Enum):
    """Closed set of Gamblegram segment keys."""
    NA = "Na"
    K = "K"
    ICA = "iCa"
    MG = "Mg"
    CL = "Cl"
    LACTATE = "Lactate"
    HCO3 = "HCO3"
    ALBUMIN = "Albumin"
    PHOSPHATE = "Phosphate"
    UNKNOWN = "Unknown"


class Side(Enum):
    CATION = "cation"
    ANION = "anion"


class HCO3Source(Enum):
    """Where the effective bicarbonate came from."""
    MEASURED = "measured"
    BLOOD_GAS = "blood_gas"
    ABSENT = "absent"


DIVALENT_KEYS = (IonKey.ICA, IonKey.MG)

# Plain-text labels with unicode charge superscripts.
ION_LABELS = {
    IonKey.NA: "Na⁺",
    IonKey.K: "K⁺",
    IonKey.ICA: "iCa²⁺",
    IonKey.MG: "Mg²⁺",
    IonKey.CL: "Cl⁻",
    IonKey.LACTATE: "Lactate⁻",
    IonKey.HCO3: "HCO₃⁻",
    IonKey.ALBUMIN: "Alb⁻",
    IonKey.PHOSPHATE: "Phos⁻",
    IonKey.UNKNOWN: "Unknown",
}
