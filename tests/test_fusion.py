"""
Tests for verdict fusion (sourceverify.fusion.combiner) and the signal
contract enforced by sourceverify.results.
"""

from __future__ import annotations

import dataclasses

import pytest

from sourceverify.errors import InvalidSignalOutput, SourceVerifyError
from sourceverify.fusion.combiner import FusionModule, calculate_verdict, map_verdict
from sourceverify.fusion.config import DEFAULT_SCORING, ScoringConfig
from sourceverify.results import Signal
from sourceverify.utils import round_half_up


def _sig(name: str, score: int, weight: float) -> Signal:
    return Signal(name, score, weight)


def _neutral_padding() -> list:
    return [_sig("Padding", 50, 10)]


class TestVerdictMapping:
    @pytest.mark.parametrize("score,verdict,confidence", [
        (55, "ai", 50),
        (54, "uncertain", 58),
        (40, "real", 50),
        (41, "uncertain", 64),
        (47, "uncertain", 100),
        (97, "ai", 96),
        (3, "real", 98),
    ])
    def test_boundaries(self, score, verdict, confidence):
        result = map_verdict(score)
        assert result.ai_score == score
        assert result.verdict == verdict
        assert result.confidence == confidence


class TestNeutralFallback:
    def test_empty_set(self):
        result = calculate_verdict([])
        assert (result.ai_score, result.verdict, result.confidence) == (50, "uncertain", 82)

    def test_zero_weight_set(self):
        result = calculate_verdict([_sig("A", 95, 0), _sig("Metadata Analysis", 95, 0)])
        assert (result.ai_score, result.verdict, result.confidence) == (50, "uncertain", 82)

    def test_all_neutral(self):
        result = calculate_verdict([_sig("A", 50, 2), _sig("B", 50, 3)])
        assert result.ai_score == 50


class TestRules:
    def test_metadata_ai_override(self):
        signals = [_sig("Metadata Analysis", 95, 1.5)] + _neutral_padding()
        result = calculate_verdict(signals)
        assert result.ai_score == 93
        assert result.verdict == "ai"

    def test_metadata_real_override(self):
        signals = [_sig("Metadata Analysis", 10, 1.5)] + _neutral_padding()
        result = calculate_verdict(signals)
        assert result.ai_score == 10
        assert result.verdict == "real"
        assert result.confidence == 89

    def test_override_only_applies_to_metadata_signal(self):
        with_meta = calculate_verdict([_sig("Metadata Analysis", 95, 1.5)] + _neutral_padding())
        without = calculate_verdict([_sig("Other", 95, 1.5)] + _neutral_padding())
        assert with_meta.ai_score - without.ai_score == 25

    def test_heavy_real_damping(self):
        signals = [
            _sig("Heavy A", 30, 3),
            _sig("Heavy B", 30, 3),
            _sig("Light A", 95, 1.5),
            _sig("Light B", 95, 1.5),
            _sig("Light C", 95, 1.5),
        ]
        assert calculate_verdict(signals).ai_score == 70

        undamped = dataclasses.replace(DEFAULT_SCORING, heavy_damping=0)
        assert calculate_verdict(signals, undamped).ai_score == 75

    def test_score_is_clamped(self):
        high = calculate_verdict([_sig(f"S{i}", 100, 2) for i in range(6)])
        low = calculate_verdict([_sig(f"S{i}", 0, 2) for i in range(6)])
        assert high.ai_score == 97
        assert low.ai_score == 3

    def test_order_does_not_matter(self):
        signals = [_sig("A", 80, 3.5), _sig("B", 20, 1.5), _sig("C", 66, 2), _sig("Metadata Analysis", 50, 1.5)]
        assert calculate_verdict(signals) == calculate_verdict(list(reversed(signals)))

    def test_accepts_mappings(self):
        as_dicts = [{"name": "A", "score": 80, "weight": 3.5}, {"name": "B", "score": 20, "weight": 1.5}]
        as_signals = [_sig("A", 80, 3.5), _sig("B", 20, 1.5)]
        assert calculate_verdict(as_dicts) == calculate_verdict(as_signals)

    def test_custom_thresholds(self):
        strict = ScoringConfig(ai_threshold=70)
        assert map_verdict(60, strict).verdict == "uncertain"
        assert map_verdict(60).verdict == "ai"

    def test_fusion_module_uses_its_config(self):
        config = ScoringConfig(metadata_swing=0)
        signals = [_sig("Metadata Analysis", 95, 1.5)] + _neutral_padding()
        assert FusionModule(config).combine(signals).ai_score == 68
        assert FusionModule().combine(signals).ai_score == 93


class TestSignalContract:
    @pytest.mark.parametrize("score", [101, -1, float("nan"), "80", None, True])
    def test_bad_score(self, score):
        with pytest.raises(InvalidSignalOutput):
            Signal("Broken", score, 1.0)

    @pytest.mark.parametrize("weight", [-0.5, float("nan"), float("inf")])
    def test_bad_weight(self, weight):
        with pytest.raises(InvalidSignalOutput):
            Signal("Broken", 50, weight)

    def test_aggregator_rejects_bad_mapping(self):
        with pytest.raises(InvalidSignalOutput):
            calculate_verdict([{"name": "Broken", "score": 120, "weight": 1}])

    def test_error_hierarchy(self):
        assert issubclass(InvalidSignalOutput, SourceVerifyError)
        assert issubclass(InvalidSignalOutput, ValueError)

    def test_as_dict(self):
        signal = Signal("Noise Residual", 77, 3.5, {"cv": 0.1})
        assert signal.as_dict() == {"name": "Noise Residual", "score": 77, "weight": 3.5}
        assert signal.as_dict(include_details=True)["details"] == {"cv": 0.1}


@pytest.mark.parametrize("value,expected", [(2.5, 3), (-2.5, -2), (0.49, 0), (-1.826, -2), (7.5, 8)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected
