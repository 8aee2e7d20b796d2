"""
Result records produced by the scoring core.

A Signal is one measurement, a VerdictResult is the aggregated decision and
an AnalysisResult is the external record handed back to callers.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List

from sourceverify.errors import InvalidSignalOutput

logger = logging.getLogger(__name__)

VERDICT_AI = "ai"
VERDICT_REAL = "real"
VERDICT_UNCERTAIN = "uncertain"


def validate_signal(name: str, score: float, weight: float) -> None:
    """Raise InvalidSignalOutput if score or weight breaks the signal contract."""
    problem = None
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        problem = f"score must be a number, got {score!r}"
    elif math.isnan(score) or not 0 <= score <= 100:
        problem = f"score {score!r} outside [0, 100]"
    elif isinstance(weight, bool) or not isinstance(weight, (int, float)):
        problem = f"weight must be a number, got {weight!r}"
    elif math.isnan(weight) or math.isinf(weight) or weight < 0:
        problem = f"weight {weight!r} must be finite and non-negative"

    if problem:
        logger.error("Invalid output from signal %r: %s", name, problem)
        raise InvalidSignalOutput(f"{name}: {problem}")


@dataclass(frozen=True)
class Signal:
    """One measurement: 0 = camera capture, 100 = AI generated, 50 = no opinion."""

    name: str
    score: int
    weight: float
    details: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self):
        validate_signal(self.name, self.score, self.weight)

    def as_dict(self, include_details: bool = False) -> Dict[str, Any]:
        out = {"name": self.name, "score": self.score, "weight": self.weight}
        if include_details and self.details:
            out["details"] = dict(self.details)
        return out


@dataclass(frozen=True)
class VerdictResult:
    ai_score: int
    verdict: str
    confidence: int


@dataclass(frozen=True)
class ImageInfo:
    """Original (pre-downscale) dimensions and a coarse format name."""

    width: int
    height: int
    format: str

    def as_dict(self) -> Dict[str, Any]:
        return {"width": self.width, "height": self.height, "format": self.format}


@dataclass(frozen=True)
class AnalysisResult:
    verdict: str
    confidence: int
    ai_score: int
    signals: List[Signal]
    processing_time_ms: int
    image_info: ImageInfo

    def as_dict(self, include_details: bool = False) -> Dict[str, Any]:
        """Render the external record with its camelCase keys."""
        return {
            "verdict": self.verdict,
            "confidence": self.confidence,
            "aiScore": self.ai_score,
            "signals": [s.as_dict(include_details) for s in self.signals],
            "processingTimeMs": self.processing_time_ms,
            "imageInfo": self.image_info.as_dict(),
        }
