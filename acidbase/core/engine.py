import logging
from typing import Callable, Mapping, Optional, Union

from .aggregator import aggregate
from .animation import GamblegramAnimator
from .constants import AnimationTuning
from .enums import IonKey
from .stack_builder import GamblegramGeometry, build_stacks
from .state import (
    AggregateResult,
    AnalysisConfig,
    Frame,
    GamblegramLayout,
    NormalizedInputs,
    RenderState,
)

logger = logging.getLogger(__name__)


class AcidBaseEngine:
    """
    Pipeline for one Gamblegram surface.

    Every update() recomputes from the aggregator onward and restarts the
    transition; only the animator keeps state between calls. Use one
    engine per surface.

    `config` is held by reference, not copied: the setters below mutate the
    caller's AnalysisConfig. Read switches back through `engine.config`.
    """
    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        geometry: Optional[GamblegramGeometry] = None,
        palette: Optional[Mapping[IonKey, str]] = None,
        clock: Optional[Callable[[], float]] = None,
        tuning: Optional[AnimationTuning] = None,
    ):
        self.config = config or AnalysisConfig()
        self.geometry = geometry or GamblegramGeometry()
        self.palette = dict(palette) if palette else {}
        self.render_state = RenderState()
        self.animator = GamblegramAnimator(self.render_state, self.geometry, tuning, clock)

        self.inputs = NormalizedInputs()
        self.result: Optional[AggregateResult] = None
        self.layout: Optional[GamblegramLayout] = None

    def update(
        self,
        inputs: Union[NormalizedInputs, Mapping[str, Optional[float]]],
        now: Optional[float] = None,
    ) -> AggregateResult:
        """Recompute everything for a new panel and start the transition."""
        if not isinstance(inputs, NormalizedInputs):
            inputs = NormalizedInputs.from_mapping(inputs)
        self.inputs = inputs
        self.result = aggregate(inputs, self.config)
        self.layout = build_stacks(self.result, inputs, self.geometry, self.palette)
        logger.debug(
            "Recomputed: SIDa=%.2f SIDe=%.2f SIG=%.2f AG=%.2f",
            self.result.sida, self.result.side, self.result.sig, self.result.anion_gap,
        )
        self.animator.start(self.layout, now)
        return self.result

    def refresh(self, now: Optional[float] = None) -> Optional[AggregateResult]:
        """Re-run the pipeline with the current inputs (config or geometry changed)."""
        if self.result is None:
            return None
        return self.update(self.inputs, now)

    def set_geometry(self, geometry: GamblegramGeometry, now: Optional[float] = None):
        self.geometry = geometry
        self.animator.geometry = geometry
        self.refresh(now)

    def set_use_measured_hco3(self, enabled: bool, now: Optional[float] = None):
        """Switch the bicarbonate source in place on `self.config` and recompute."""
        self.config.use_measured_hco3 = bool(enabled)
        self.refresh(now)

    def tick(self, now: Optional[float] = None) -> Optional[Frame]:
        return self.animator.tick(now)

    def finish_animation(self) -> Optional[Frame]:
        return self.animator.finish()

    @property
    def is_animating(self) -> bool:
        return self.animator.is_active

    def get_latest_result(self) -> Optional[AggregateResult]:
        return self.result

    def get_latest_layout(self) -> Optional[GamblegramLayout]:
        return self.layout
