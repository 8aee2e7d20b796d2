"""
Gradient Micro-Texture: how much fine texture survives in smooth regions.

Real photos keep grain inside flat areas; generated images render them as
clean gradients with almost no second-order detail.
"""

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

GRADIENT_MICRO_TEXTURE = "Gradient Micro-Texture"
GRADIENT_MICRO_TEXTURE_WEIGHT = 1.5
TEXTURE_BLOCK = 32
TEXTURE_TARGET_BLOCKS = 200
SMOOTH_GRADIENT = 5.0


def analyze_gradient_micro_texture(pixels, w: int, h: int) -> Signal:
    if is_too_small(w, h):
        return Signal(GRADIENT_MICRO_TEXTURE, NEUTRAL_SCORE, GRADIENT_MICRO_TEXTURE_WEIGHT)

    gray = luminance(as_rgba(pixels, w, h))
    # first[y, x] = |g[x+1] - g[x]|, second[y, x] = |2 g[x+1] - g[x] - g[x+2]|
    first = np.abs(gray[:, 1:] - gray[:, :-1])
    second = np.abs(2 * gray[:, 1:-1] - gray[:, :-2] - gray[:, 2:])

    bs = TEXTURE_BLOCK
    bx, by = w // bs, h // bs
    step = block_stride(bx * by, TEXTURE_TARGET_BLOCKS)

    smooth = total = 0
    micro_sum = 0.0
    for iy in range(0, by, step):
        for ix in range(0, bx, step):
            y0, x0 = iy * bs, ix * bs
            avg_grad = float(first[y0:y0 + bs - 1, x0:x0 + bs - 2].mean())
            avg_micro = float(second[y0:y0 + bs - 1, x0:x0 + bs - 2].mean())
            total += 1
            if avg_grad < SMOOTH_GRADIENT:
                smooth += 1
                micro_sum += avg_micro / avg_grad if avg_grad > 0.5 else avg_micro

    smooth_fraction = smooth / total if total else 0.0
    micro_ratio = micro_sum / smooth if smooth else 0.0

    score = 50
    if smooth_fraction > 0.6:
        score += 20
    elif smooth_fraction > 0.45:
        score += 12
    elif smooth_fraction > 0.3:
        score += 5
    elif smooth_fraction < 0.08:
        score -= 15
    elif smooth_fraction < 0.15:
        score -= 8

    if micro_ratio < 0.3:
        score += 20
    elif micro_ratio < 0.6:
        score += 12
    elif micro_ratio < 1:
        score += 3
    elif micro_ratio > 2.5:
        score -= 18
    elif micro_ratio > 1.8:
        score -= 10

    details = {"sf": round(smooth_fraction, 3), "amr": round(micro_ratio, 3)}
    return Signal(GRADIENT_MICRO_TEXTURE, clamp_score(score, 5, 95), GRADIENT_MICRO_TEXTURE_WEIGHT, details)
