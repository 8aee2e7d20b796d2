"""
Edge Coherence: distribution of Sobel gradient magnitudes.

Over-smoothed edges (low median gradient, narrow percentile range, low
p90/p50 sharpness ratio) lean AI; crisp natural edges lean real.
"""

import cv2
import numpy as np

from sourceverify.forensics.pixels import NEUTRAL_SCORE, as_rgba, clamp_score, is_too_small, luminance
from sourceverify.results import Signal

EDGE_COHERENCE = "Edge Coherence"
EDGE_COHERENCE_WEIGHT = 1.5
EDGE_TARGET_SPAN = 300


def _percentile(sorted_values: np.ndarray, q: float) -> float:
    return float(sorted_values[int(len(sorted_values) * q)])


def analyze_edge_coherence(pixels, w: int, h: int) -> Signal:
    if is_too_small(w, h):
        return Signal(EDGE_COHERENCE, NEUTRAL_SCORE, EDGE_COHERENCE_WEIGHT)

    gray = luminance(as_rgba(pixels, w, h))
    gx = cv2.Sobel(gray, cv2.CV_64F, 1, 0, ksize=3)
    gy = cv2.Sobel(gray, cv2.CV_64F, 0, 1, ksize=3)

    step = max(1, min(w, h) // EDGE_TARGET_SPAN)
    mags = np.sqrt(gx[1:h - 1:step, 1:w - 1:step] ** 2 + gy[1:h - 1:step, 1:w - 1:step] ** 2)
    mags = np.sort(mags.ravel())

    p10 = _percentile(mags, 0.1)
    p50 = _percentile(mags, 0.5)
    p90 = _percentile(mags, 0.9)
    edge_range = p90 - p10
    sharp_ratio = p90 / p50 if p50 > 1e-9 else 1.0

    score = 50
    if p50 < 4 and edge_range < 25:
        score += 28
    elif p50 < 6:
        score += 18
    elif p50 < 10:
        score += 8
    elif p50 > 25:
        score -= 20
    elif p50 > 18:
        score -= 10

    if sharp_ratio < 2.5:
        score += 12
    elif sharp_ratio < 4:
        score += 5
    elif sharp_ratio > 10:
        score -= 12
    elif sharp_ratio > 7:
        score -= 5

    details = {"p50": round(p50, 2), "sharpR": round(sharp_ratio, 2)}
    return Signal(EDGE_COHERENCE, clamp_score(score, 5, 95), EDGE_COHERENCE_WEIGHT, details)
