"""
Noise-based signals.

Camera sensors leave shot noise that grows with brightness and varies from
region to region. Generated images tend to carry little noise, spread evenly
and uncorrelated with brightness.
"""

import cv2
import numpy as np

from sourceverify.forensics.pixels import (
    NEUTRAL_SCORE,
    as_rgba,
    block_stride,
    clamp_score,
    is_too_small,
    luminance,
)
from sourceverify.results import Signal

NOISE_RESIDUAL = "Noise Residual"
NOISE_RESIDUAL_WEIGHT = 3.5
NOISE_BLOCK = 32
NOISE_TARGET_BLOCKS = 300

PRNU = "PRNU Uniformity"
PRNU_WEIGHT = 1.5
PRNU_BLOCK = 64

_EPS = 1e-12


def _pearson(a: np.ndarray, b: np.ndarray) -> float:
    da = a - a.mean()
    db = b - b.mean()
    var_a = float(np.sum(da * da))
    var_b = float(np.sum(db * db))
    if var_a <= _EPS or var_b <= _EPS:
        return 0.0
    return float(np.sum(da * db) / np.sqrt(var_a * var_b))


def analyze_noise_residual(pixels, w: int, h: int) -> Signal:
    """
    Laplacian noise per 32x32 block.

    Scores the spread of block noise (cv), its mean level, and the correlation
    between block brightness and block noise.
    """
    if is_too_small(w, h):
        return Signal(NOISE_RESIDUAL, NEUTRAL_SCORE, NOISE_RESIDUAL_WEIGHT)

    gray = luminance(as_rgba(pixels, w, h))
    # 4-neighbour Laplacian; only block interiors are read so borders don't matter
    lap = cv2.Laplacian(gray, cv2.CV_64F, ksize=1)

    bs = NOISE_BLOCK
    bx, by = w // bs, h // bs
    step = block_stride(bx * by, NOISE_TARGET_BLOCKS)

    devs, brights = [], []
    for iy in range(0, by, step):
        for ix in range(0, bx, step):
            y0, x0 = iy * bs, ix * bs
            block_lap = lap[y0 + 1:y0 + bs - 1, x0 + 1:x0 + bs - 1]
            block_gray = gray[y0 + 1:y0 + bs - 1, x0 + 1:x0 + bs - 1]
            devs.append(float(np.std(block_lap)))
            brights.append(float(np.mean(block_gray)))

    if len(devs) < 4:
        return Signal(NOISE_RESIDUAL, NEUTRAL_SCORE, NOISE_RESIDUAL_WEIGHT, {"blocks": len(devs)})

    devs = np.array(devs)
    brights = np.array(brights)
    mean = float(devs.mean())
    cv = float(devs.std()) / mean if mean > 0 else 0.0
    shot_corr = _pearson(brights, devs)

    score = 50
    if shot_corr > 0.45:
        score -= 18
    elif shot_corr > 0.3:
        score -= 12
    elif shot_corr > 0.15:
        score -= 6
    elif shot_corr < -0.15:
        score += 15
    elif shot_corr < 0:
        score += 8
    else:
        score += 5

    if cv < 0.2:
        score += 22  # suspiciously uniform
    elif cv < 0.4:
        score += 12
    elif cv < 0.6:
        score += 4
    elif cv > 1.0:
        score -= 18
    elif cv > 0.8:
        score -= 10

    if mean < 3:
        score += 12
    elif mean < 6:
        score += 5
    elif mean > 15:
        score -= 18
    elif mean > 10:
        score -= 10
    elif mean > 8:
        score -= 3

    details = {"cv": round(cv, 3), "shotCorr": round(shot_corr, 3), "mean": round(mean, 2)}
    return Signal(NOISE_RESIDUAL, clamp_score(score, 5, 95), NOISE_RESIDUAL_WEIGHT, details)


def analyze_prnu(pixels, w: int, h: int) -> Signal:
    """Uniformity of horizontal-difference residuals across 64x64 blocks."""
    if is_too_small(w, h):
        return Signal(PRNU, NEUTRAL_SCORE, PRNU_WEIGHT)

    bs = PRNU_BLOCK
    bx, by = w // bs, h // bs
    if bx < 2 or by < 2:
        return Signal(PRNU, NEUTRAL_SCORE, PRNU_WEIGHT, {"error": "too small"})

    gray = luminance(as_rgba(pixels, w, h))
    # diff[y, x] = gray[y, x] - gray[y, x + 1]
    diff = gray[:, :-1] - gray[:, 1:]

    residuals = []
    for iy in range(by):
        for ix in range(bx):
            y0, x0 = iy * bs, ix * bs
            residuals.append(float(np.std(diff[y0 + 1:y0 + bs - 1, x0 + 1:x0 + bs - 1])))

    if len(residuals) < 4:
        return Signal(PRNU, NEUTRAL_SCORE, PRNU_WEIGHT)

    residuals = np.array(residuals)
    mean = float(residuals.mean())
    cv = float(residuals.std()) / mean if mean > 0 else 0.0

    score = 50
    if cv < 0.15:
        score += 20
    elif cv < 0.3:
        score += 10
    elif cv > 0.6:
        score -= 15
    elif cv > 0.45:
        score -= 8

    return Signal(PRNU, clamp_score(score, 10, 90), PRNU_WEIGHT, {"cv": round(cv, 3), "mean": round(mean, 2)})
