import pytest

from acidbase.core.aggregator import aggregate
from acidbase.core.enums import IonKey, Side
from acidbase.core.stack_builder import (
    GamblegramGeometry,
    build_stacks,
    legend_items,
    order_column,
    unknown_caption,
    unknown_segment,
)
from acidbase.core.state import AggregateResult, IonSegment, NormalizedInputs


def _result(sig, **kwargs):
    values = dict(
        sida=0.0, side=0.0, sig=sig, anion_gap=0.0,
        albumin_charge=0.0, phosphate_charge=0.0, effective_hco3=0.0,
    )
    values.update(kwargs)
    return AggregateResult(**values)


@pytest.fixture
def layout(normal_inputs):
    return build_stacks(aggregate(normal_inputs), normal_inputs)


class TestOrdering:
    def test_anion_order(self, layout):
        keys = [p.key for p in layout.anions]
        assert keys == [
            IonKey.CL, IonKey.HCO3, IonKey.ALBUMIN,
            IonKey.PHOSPHATE, IonKey.LACTATE, IonKey.UNKNOWN,
        ]

    def test_cation_order(self, layout):
        assert [p.key for p in layout.cations] == [IonKey.NA, IonKey.K, IonKey.ICA, IonKey.MG]

    def test_unknown_last_even_if_largest(self):
        segs = [IonSegment(IonKey.UNKNOWN, 50.0), IonSegment(IonKey.NA, 10.0), IonSegment(IonKey.K, 20.0)]
        assert [s.key for s in order_column(segs)] == [IonKey.K, IonKey.NA, IonKey.UNKNOWN]

    def test_ties_keep_input_order(self):
        segs = [IonSegment(IonKey.CL, 1.0), IonSegment(IonKey.LACTATE, 1.0)]
        assert [s.key for s in order_column(segs)] == [IonKey.CL, IonKey.LACTATE]


class TestUnknown:
    def test_positive_sig_adds_unknown_anion(self, layout):
        assert layout.sig == 5.5
        assert layout.anions[-1].value == 5.5
        assert all(not p.segment.is_unknown for p in layout.cations)

    def test_negative_sig_adds_unknown_cation(self):
        side, seg = unknown_segment(-3.2)
        assert side == Side.CATION
        assert seg.value == 3.2

    def test_epsilon_band(self):
        assert unknown_segment(0.0) == (None, None)
        layout = build_stacks(_result(sig=0.04), NormalizedInputs(na=140.0))
        assert layout.sig == 0.0
        keys = [p.key for _, col in layout.columns() for p in col]
        assert IonKey.UNKNOWN not in keys

    def test_rounded_sig_is_used(self):
        layout = build_stacks(_result(sig=2.26), NormalizedInputs())
        assert layout.anions[-1].value == 2.3

    def test_negative_half_rounds_to_no_unknown(self):
        inputs = NormalizedInputs(na=0.0, cl=0.05)
        result = aggregate(inputs)
        assert result.sig == pytest.approx(-0.05)
        assert result.sig_rounded == 0.0
        layout = build_stacks(result, inputs)
        keys = [p.key for _, col in layout.columns() for p in col]
        assert IonKey.UNKNOWN not in keys
        assert unknown_caption(layout.sig) == "Unknown: none"

    def test_half_rounds_up(self):
        inputs = NormalizedInputs(na=0.35)
        result = aggregate(inputs)
        assert result.sig_rounded == 0.4
        layout = build_stacks(result, inputs)
        assert layout.anions[-1].key == IonKey.UNKNOWN
        assert layout.anions[-1].value == 0.4

    def test_captions(self):
        assert unknown_caption(5.5) == "Unknown anions: 5.5 mEq/L"
        assert unknown_caption(-2.0) == "Unknown cations: 2.0 mEq/L"
        assert unknown_caption(0.0) == "Unknown: none"


class TestPlacement:
    def test_totals(self, layout):
        assert layout.total_cations == pytest.approx(147.4)
        assert layout.total_anions == pytest.approx(sum(p.value for p in layout.anions))
        assert layout.max_stack == max(layout.total_cations, layout.total_anions)

    def test_column_by_side(self, layout):
        assert layout.column(Side.CATION) is layout.cations
        assert layout.column(Side.ANION) is layout.anions

    def test_columns_stack_from_baseline(self, layout):
        for _, column in layout.columns():
            first = column[0]
            assert first.offset + first.extent == pytest.approx(layout.baseline)
            for lower, upper in zip(column, column[1:]):
                assert upper.offset + upper.extent == pytest.approx(lower.offset)

    def test_proportional_extent(self, layout):
        geometry = GamblegramGeometry()
        na = layout.cations[0]
        assert na.extent == pytest.approx(140.0 / layout.max_stack * geometry.available_height)

    def test_min_segment(self, layout):
        mg = layout.cations[-1]
        assert mg.key == IonKey.MG
        assert mg.extent == GamblegramGeometry().min_segment

    def test_empty_panel_floor(self):
        layout = build_stacks(_result(sig=0.0), NormalizedInputs())
        assert layout.max_stack == 1.0
        assert layout.total_cations == 0.0

    def test_palette(self, normal_inputs):
        palette = {IonKey.NA: "#123456"}
        layout = build_stacks(aggregate(normal_inputs), normal_inputs, palette=palette)
        assert layout.cations[0].segment.color == "#123456"
        assert layout.cations[1].segment.color == IonKey.K.value


class TestGeometry:
    def test_defaults(self):
        g = GamblegramGeometry()
        assert g.baseline == 19.0 + 624.0
        assert g.right_x == g.left_x + g.bar_width + g.gap

    def test_desktop_width(self):
        g = GamblegramGeometry.for_width(1000)
        assert g.pad_top == 40.0
        assert g.available_height == 1300.0
        assert g.font_size == 18.0

    def test_minimum_width(self):
        assert GamblegramGeometry.for_width(100).width == 300.0

    def test_mobile_uses_canvas_height(self):
        g = GamblegramGeometry.for_width(400, mobile=True, canvas_height=600)
        assert g.available_height == pytest.approx(600 - 28 - g.pad_top - 12)
        assert g.bar_fraction == 0.28


def test_legend_items(layout):
    items = legend_items(layout)
    keys = [k for k, _, _ in items]
    assert keys[0] == IonKey.CL
    assert len(keys) == len(set(keys))
    assert IonKey.NA in keys
