"""
Fusion Module: combines the individual signals into one verdict.
"""

import logging
from collections.abc import Mapping
from typing import Iterable, List

from sourceverify.fusion.config import DEFAULT_SCORING, ScoringConfig
from sourceverify.results import (
    VERDICT_AI,
    VERDICT_REAL,
    VERDICT_UNCERTAIN,
    Signal,
    VerdictResult,
    validate_signal,
)
from sourceverify.utils import round_half_up

logger = logging.getLogger(__name__)


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def _coerce(signals: Iterable) -> List[Signal]:
    out = []
    for s in signals:
        if isinstance(s, Mapping):
            s = Signal(s["name"], s["score"], s["weight"])
        else:
            validate_signal(s.name, s.score, s.weight)
        out.append(s)
    return out


def _consensus_adjustment(strong: int, mild: int, config: ScoringConfig) -> int:
    if strong >= config.strong_votes:
        return config.strong_adjustment
    for min_votes, adjustment in config.mild_tiers:
        if mild >= min_votes:
            return adjustment
    return 0


def map_verdict(ai_score: int, config: ScoringConfig = DEFAULT_SCORING) -> VerdictResult:
    """Map a final AI score onto (verdict, confidence)."""
    if ai_score >= config.ai_threshold:
        verdict = VERDICT_AI
        confidence = round_half_up(50 + (ai_score - config.ai_threshold) * config.ai_confidence_slope)
    elif ai_score <= config.real_threshold:
        verdict = VERDICT_REAL
        confidence = round_half_up(50 + (config.real_threshold - ai_score) * config.real_confidence_slope)
    else:
        verdict = VERDICT_UNCERTAIN
        confidence = round_half_up(100 - abs(ai_score - config.uncertain_center) * config.uncertain_confidence_slope)
    return VerdictResult(ai_score, verdict, max(0, min(100, confidence)))


def calculate_verdict(signals: Iterable, config: ScoringConfig = DEFAULT_SCORING) -> VerdictResult:
    """
    Weighted mean of the signal scores plus rule-based adjustments.

    Deterministic and total: an empty or zero-weight set yields the neutral
    score. Malformed signals raise InvalidSignalOutput.
    """
    # Zero-weight signals abstain from every rule, not just the mean
    signals = [s for s in _coerce(signals) if s.weight > 0]
    if not signals:
        logger.debug("No weighted signals, falling back to neutral score")

    total_weight = sum(s.weight for s in signals)
    weighted = sum(s.score * s.weight for s in signals)
    base = round_half_up(weighted / total_weight) if total_weight > 0 else config.neutral_score

    neutral = config.neutral_score
    ai_weight = sum(s.weight for s in signals if s.score > neutral)
    real_weight = sum(s.weight for s in signals if s.score < neutral)
    mild_ai = sum(1 for s in signals if s.score >= config.mild_ai)
    strong_ai = sum(1 for s in signals if s.score >= config.strong_ai)
    mild_real = sum(1 for s in signals if s.score <= config.mild_real)
    strong_real = sum(1 for s in signals if s.score <= config.strong_real)

    adj = _consensus_adjustment(strong_ai, mild_ai, config)
    adj -= _consensus_adjustment(strong_real, mild_real, config)

    weight_ratio = (ai_weight - real_weight) / total_weight if total_weight > 0 else 0.0
    adj += round_half_up(weight_ratio * config.weight_ratio_gain)

    dev = base - neutral
    if abs(dev) > config.push_min_deviation:
        adj += round_half_up(dev * config.push_linear + _sign(dev) * dev * dev * config.push_quadratic)

    meta = next((s for s in signals if s.name == config.metadata_signal), None)
    if meta is not None:
        if meta.score >= config.metadata_ai_at:
            adj += config.metadata_swing
        elif meta.score <= config.metadata_real_at:
            adj -= config.metadata_swing

    heavy = [s for s in signals if s.weight >= config.heavy_weight]
    heavy_real = sum(1 for s in heavy if s.score < config.heavy_real_below)
    heavy_ai = sum(1 for s in heavy if s.score > config.heavy_ai_above)
    if heavy_real >= config.heavy_min_real and heavy_ai == 0 and base + adj > neutral:
        adj -= config.heavy_damping

    ai_score = round_half_up(max(config.min_ai_score, min(config.max_ai_score, base + adj)))
    result = map_verdict(ai_score, config)
    logger.debug("Fusion: base=%d adj=%d -> %d (%s, %d%%)", base, adj, ai_score, result.verdict, result.confidence)
    return result


class FusionModule:
    """Combines per-signal scores into the final verdict."""

    def __init__(self, config: ScoringConfig = DEFAULT_SCORING):
        self.config = config

    def combine(self, signals: Iterable) -> VerdictResult:
        return calculate_verdict(signals, self.config)
