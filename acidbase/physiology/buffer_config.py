from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class AlbuminResidueConfig:
    """
    Figge–Fencl v3.0 residue inventory for human serum albumin (37°C).

    Basic groups are positive when protonated, acidic groups negative when
    deprotonated. Group entries are (residue count, pKa).
    """
    # N->B conformational transition (domain-1 histidines)
    nb_shift_max: float = 0.4
    nb_midpoint_ph: float = 6.9

    # His 1-5: domain 1, pKa shifted down by NB(pH)
    histidine_nb: Tuple[float, ...] = (7.12, 7.22, 7.10, 7.49, 7.01)
    # His 6-13 from NMR, His 14-16 fitted/assigned
    histidine_fixed: Tuple[float, ...] = (
        7.31, 6.75, 6.36, 4.85, 5.76,
        6.17, 6.73, 5.82,
        5.10, 6.70, 6.20,
    )

    # 59 lysines: 9 low-titrating residues in 5 groups plus 50 normal
    lysine: Tuple[Tuple[int, float], ...] = (
        (2, 5.800),
        (2, 6.150),
        (2, 7.510),
        (2, 7.685),
        (1, 7.860),
        (50, 10.30),
    )
    arginine: Tuple[int, float] = (24, 12.5)
    amino_terminus: Tuple[int, float] = (1, 8.0)

    # Acidic groups
    carboxyl_terminus: Tuple[int, float] = (1, 3.1)
    asp_glu: Tuple[int, float] = (98, 3.9)  # 36 Asp + 62 Glu
    cysteine: Tuple[int, float] = (1, 8.5)  # Cys-34 free thiol
    tyrosine: Tuple[int, float] = (18, 11.7)

    def basic_groups(self) -> Tuple[Tuple[int, float], ...]:
        return self.lysine + (self.arginine, self.amino_terminus)

    def acidic_groups(self) -> Tuple[Tuple[int, float], ...]:
        return (self.carboxyl_terminus, self.asp_glu, self.cysteine, self.tyrosine)


@dataclass(frozen=True)
class PhosphateConfig:
    """Apparent plasma pKa values of phosphoric acid (Sendroy & Hastings, 37°C)."""
    pka1: float = 1.915
    pka2: float = 6.66
    pka3: float = 11.78


@dataclass(frozen=True)
class LinearBufferConfig:
    """Single-pKa Figge/Fencl approximations used by the "Linear" models."""
    albumin_coeff: float = 0.123  # mEq per g albumin
    albumin_pka: float = 7.08
    phosphate_coeff: float = 0.309
    phosphate_pka: float = 6.8


ALBUMIN_RESIDUES = AlbuminResidueConfig()
PHOSPHATE_PKA = PhosphateConfig()
LINEAR_BUFFERS = LinearBufferConfig()
