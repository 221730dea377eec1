from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from acidbase.core.engine import AcidBaseEngine
from acidbase.core.state import AnalysisConfig, NormalizedInputs


NORMAL_PANEL = dict(
    na=140.0, k=4.0, ica=1.2, mg=0.5, cl=104.0, lactate=1.0,
    albumin=4.0, phosphate=1.0, ph=7.4, pco2=40.0,
)


@pytest.fixture
def normal_inputs():
    """Typical adult panel (albumin 4.0 g/dL, no measured HCO3)."""
    return NormalizedInputs(**NORMAL_PANEL)


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(clock):
    """Engine on a fake clock so transitions are deterministic."""
    return AcidBaseEngine(AnalysisConfig(), clock=clock)
