"""
Image analyzer: the single entry point callers use.

Samples the image, runs the enabled forensic signals, fuses them into a
verdict and wraps everything with timing and image info.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from sourceverify.forensics.detector import ForensicDetector, select_signals
from sourceverify.forensics.metadata import INSPECTORS
from sourceverify.fusion.combiner import FusionModule
from sourceverify.fusion.config import DEFAULT_SCORING, ScoringConfig
from sourceverify.results import AnalysisResult, ImageInfo
from sourceverify.sampling import MAX_DIMENSION, sample_image

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "uploaded.jpg"
DEFAULT_FORMAT = "JPEG"

EXTENSION_FORMATS = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".webp": "WEBP",
    ".gif": "GIF",
    ".bmp": "BMP",
}


@dataclass(frozen=True)
class AnalyzerSettings:
    """
    Caller-facing options.

    enabled_signals: names to run; None runs the core six. Disabled signals
        are left out of the fusion entirely.
    metadata_mode: "filename" or "exif".
    max_workers: >1 runs the signals on a thread pool.
    """

    enabled_signals: Optional[FrozenSet[str]] = None
    metadata_mode: str = "filename"
    max_dimension: int = MAX_DIMENSION
    max_workers: int = 1
    scoring: ScoringConfig = DEFAULT_SCORING

    def __post_init__(self):
        if self.enabled_signals is not None:
            object.__setattr__(self, "enabled_signals", frozenset(self.enabled_signals))
            select_signals(self.enabled_signals)
        if self.metadata_mode not in INSPECTORS:
            raise ValueError(f"Unknown metadata mode {self.metadata_mode!r}, expected one of {sorted(INSPECTORS)}")
        if self.max_dimension < 1:
            raise ValueError("max_dimension must be positive")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

    @classmethod
    def with_signals(cls, names: Iterable[str], **kwargs) -> "AnalyzerSettings":
        return cls(enabled_signals=frozenset(names), **kwargs)


def infer_format(file_name: str, decoded_format: Optional[str] = None) -> str:
    """Coarse format name: file extension first, then what the decoder saw."""
    ext = os.path.splitext(file_name or "")[1].lower()
    if ext in EXTENSION_FORMATS:
        return EXTENSION_FORMATS[ext]
    return decoded_format or DEFAULT_FORMAT


class Analyzer:
    """Runs the whole pipeline for one image at a time; holds no per-call state."""

    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or AnalyzerSettings()
        self.detector = ForensicDetector(
            enabled=self.settings.enabled_signals,
            metadata_mode=self.settings.metadata_mode,
            max_workers=self.settings.max_workers,
        )
        self.fusion = FusionModule(self.settings.scoring)

    def analyze(self, image_bytes: bytes, file_name: str = DEFAULT_FILE_NAME) -> AnalysisResult:
        """Analyze raw image bytes. Raises DecodeError if they are not an image."""
        start = time.perf_counter()

        sampled = sample_image(image_bytes, self.settings.max_dimension)
        signals = self.detector.analyze(
            sampled.pixels, sampled.width, sampled.height, file_name, image_bytes
        )
        verdict = self.fusion.combine(signals)

        elapsed_ms = int(round((time.perf_counter() - start) * 1000))
        logger.debug(
            "%s: %s (score=%d, confidence=%d%%) in %dms",
            file_name, verdict.verdict, verdict.ai_score, verdict.confidence, elapsed_ms,
        )

        return AnalysisResult(
            verdict=verdict.verdict,
            confidence=verdict.confidence,
            ai_score=verdict.ai_score,
            signals=signals,
            processing_time_ms=elapsed_ms,
            image_info=ImageInfo(
                sampled.original_width,
                sampled.original_height,
                infer_format(file_name, sampled.format),
            ),
        )


def analyze(image_bytes: bytes, file_name: str = DEFAULT_FILE_NAME,
            settings: Optional[AnalyzerSettings] = None) -> AnalysisResult:
    """Analyze one image with the given (or default) settings."""
    return Analyzer(settings).analyze(image_bytes, file_name)
