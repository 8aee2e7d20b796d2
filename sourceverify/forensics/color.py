"""
Color Correlation: Pearson correlation between R, G and B.

Camera pipelines leave channels that agree in a mid band (0.92-0.99).
Near-perfect agreement (>0.995), weak agreement (<0.85) or pairs that all
agree to the same degree push the score up.
"""

import numpy as np

from sourceverify.forensics.pixels import NEUTRAL_SCORE, as_rgba, clamp_score, is_too_small
from sourceverify.results import Signal

COLOR_CORRELATION = "Color Correlation"
COLOR_CORRELATION_WEIGHT = 2.0
TARGET_SAMPLES = 50000
MIN_SAMPLES = 100


def channel_correlations(samples: np.ndarray):
    """
    Return (r_g, g_b, r_b) for an (n, 3) float array.

    A pair involving a constant channel has no defined correlation and
    counts as 0. Returns None when every channel is constant.
    """
    centered = samples - samples.mean(axis=0)
    var = (centered ** 2).mean(axis=0)
    flat = var <= 1e-12
    if np.all(flat):
        return None

    def corr(a, b):
        if flat[a] or flat[b]:
            return 0.0
        return float((centered[:, a] * centered[:, b]).mean() / np.sqrt(var[a] * var[b]))

    return corr(0, 1), corr(1, 2), corr(0, 2)


def analyze_color_correlation(pixels, w: int, h: int) -> Signal:
    if is_too_small(w, h):
        return Signal(COLOR_CORRELATION, NEUTRAL_SCORE, COLOR_CORRELATION_WEIGHT)

    stride = max(1, (w * h) // TARGET_SAMPLES)
    samples = as_rgba(pixels, w, h).reshape(-1, 4)[::stride, :3].astype(np.float64)
    if len(samples) < MIN_SAMPLES:
        return Signal(COLOR_CORRELATION, NEUTRAL_SCORE, COLOR_CORRELATION_WEIGHT, {"c": len(samples)})

    correlations = channel_correlations(samples)
    if correlations is None:
        return Signal(COLOR_CORRELATION, NEUTRAL_SCORE, COLOR_CORRELATION_WEIGHT, {"zeroVariance": True})

    avg = sum(correlations) / 3
    spread = max(correlations) - min(correlations)

    score = 50
    if avg > 0.995:
        score += 10
    elif 0.92 < avg < 0.99:
        score -= 12
    elif avg < 0.75:
        score += 15
    elif avg < 0.85:
        score += 8

    if spread > 0.15:
        score -= 5
    elif spread < 0.03:
        score += 8

    details = {"avgC": round(avg, 4), "cSpread": round(spread, 4)}
    return Signal(COLOR_CORRELATION, clamp_score(score, 10, 90), COLOR_CORRELATION_WEIGHT, details)
