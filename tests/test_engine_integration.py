import pytest

from acidbase.core.engine import AcidBaseEngine
from acidbase.core.enums import HCO3Source, IonKey, Side
from acidbase.core.stack_builder import GamblegramGeometry
from acidbase.core.state import AnalysisConfig


class TestEngine:
    """End-to-end: panel -> aggregates -> stacks -> transition."""

    def test_update_from_mapping(self, engine):
        result = engine.update({
            "Na": 140, "K": 4, "iCa": 1.2, "Mg": 0.5, "Cl": 104, "Lactate": 1,
            "Albumin": 4.0, "Phosphate": 1.0, "pH": 7.4, "pCO2": 40,
        })
        assert result.sida == pytest.approx(42.4)
        assert result.sig_rounded == 5.5
        assert engine.get_latest_result() is result

    def test_scenario_layout(self, engine, normal_inputs):
        engine.update(normal_inputs)
        layout = engine.get_latest_layout()
        unknown = layout.anions[-1]
        assert unknown.key == IonKey.UNKNOWN
        assert unknown.value == 5.5
        assert layout.total_anions == pytest.approx(layout.total_cations, abs=0.1)

    def test_animation_lifecycle(self, engine, clock, normal_inputs):
        engine.update(normal_inputs)
        assert engine.is_animating
        clock.advance(200.0)
        frame = engine.tick()
        assert 0.0 < frame.progress < 1.0
        clock.advance(200.0)
        assert engine.tick().finished
        assert not engine.is_animating

    def test_repeated_update_is_static(self, engine, normal_inputs):
        engine.update(normal_inputs)
        engine.finish_animation()
        engine.update(normal_inputs)
        assert not engine.is_animating

    def test_toggle_measured_bicarbonate(self, engine, normal_inputs):
        normal_inputs.hco3 = 30.0
        engine.update(normal_inputs)
        assert engine.get_latest_result().hco3_source == HCO3Source.BLOOD_GAS
        engine.set_use_measured_hco3(True)
        result = engine.get_latest_result()
        assert result.hco3_source == HCO3Source.MEASURED
        assert result.effective_hco3 == 30.0
        hco3 = [p for p in engine.get_latest_layout().anions if p.key == IonKey.HCO3][0]
        assert hco3.value == 30.0

    def test_setter_mutates_callers_config(self, clock, normal_inputs):
        config = AnalysisConfig()
        engine = AcidBaseEngine(config, clock=clock)
        engine.update(normal_inputs)
        engine.set_use_measured_hco3(True)
        assert engine.config is config
        assert config.use_measured_hco3 is True

    def test_refresh_without_inputs(self, engine):
        assert engine.refresh() is None

    def test_set_geometry_rebuilds(self, engine, normal_inputs):
        engine.update(normal_inputs)
        geometry = GamblegramGeometry.for_width(800)
        engine.set_geometry(geometry)
        assert engine.get_latest_layout().baseline == geometry.baseline
        assert engine.animator.geometry is geometry

    def test_surfaces_are_independent(self, clock, normal_inputs):
        first = AcidBaseEngine(clock=clock)
        second = AcidBaseEngine(clock=clock)
        first.update(normal_inputs)
        first.finish_animation()
        assert second.render_state.lookup(IonKey.NA) is None
        second.update(normal_inputs)
        frame = second.animator.last_frame
        na = [s for s in frame.column(Side.CATION) if s.key == IonKey.NA][0]
        assert na.extent == pytest.approx(8.0)
