"""SourceVerify: forensic scoring of AI-generated versus camera-captured images."""

from sourceverify.analyzer import Analyzer, AnalyzerSettings, analyze
from sourceverify.errors import DecodeError, InvalidSignalOutput, SourceVerifyError
from sourceverify.forensics.detector import ALL_SIGNALS, CORE_SIGNALS, EXTENDED_SIGNALS, ForensicDetector
from sourceverify.fusion.combiner import FusionModule, calculate_verdict
from sourceverify.fusion.config import DEFAULT_SCORING, ScoringConfig
from sourceverify.results import AnalysisResult, ImageInfo, Signal, VerdictResult

__version__ = "1.0.0"

__all__ = [
    "ALL_SIGNALS",
    "AnalysisResult",
    "Analyzer",
    "AnalyzerSettings",
    "CORE_SIGNALS",
    "DEFAULT_SCORING",
    "DecodeError",
    "EXTENDED_SIGNALS",
    "ForensicDetector",
    "FusionModule",
    "ImageInfo",
    "InvalidSignalOutput",
    "ScoringConfig",
    "Signal",
    "SourceVerifyError",
    "VerdictResult",
    "analyze",
    "calculate_verdict",
]
