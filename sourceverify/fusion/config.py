"""
Scoring constants for the verdict fusion.

Every threshold and tier the aggregator uses lives here, so the heuristic
can be tuned or swapped by passing another ScoringConfig instance.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ScoringConfig:
    neutral_score: int = 50

    # Per-signal vote thresholds
    mild_ai: int = 65
    strong_ai: int = 78
    mild_real: int = 35
    strong_real: int = 22

    # Consensus tiers: strong votes first, then (min mild votes, adjustment) in order
    strong_votes: int = 3
    strong_adjustment: int = 14
    mild_tiers: Tuple[Tuple[int, int], ...] = ((5, 12), (3, 8), (2, 5), (1, 2))

    # Weight balance between AI-leaning and real-leaning signals
    weight_ratio_gain: float = 14

    # Push away from the neutral score
    push_min_deviation: int = 1
    push_linear: float = 1.1
    push_quadratic: float = 0.025

    # Hard metadata override
    metadata_signal: str = "Metadata Analysis"
    metadata_ai_at: int = 90
    metadata_real_at: int = 15
    metadata_swing: int = 25

    # Damping when heavy real-leaning signals outvote a lone heavy outlier
    heavy_weight: float = 3
    heavy_real_below: int = 40
    heavy_ai_above: int = 60
    heavy_min_real: int = 2
    heavy_damping: int = 5

    min_ai_score: int = 3
    max_ai_score: int = 97

    # Verdict mapping
    ai_threshold: int = 55
    real_threshold: int = 40
    ai_confidence_slope: float = 1.1
    real_confidence_slope: float = 1.3
    uncertain_center: int = 47
    uncertain_confidence_slope: float = 6


DEFAULT_SCORING = ScoringConfig()
