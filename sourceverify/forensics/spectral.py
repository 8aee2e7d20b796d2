"""
Spectral Nyquist: row-wise frequency falloff on a centred 64x64 patch.

Upsampling layers in generators leave a spike at the Nyquist bin and an
unnatural high-to-low frequency energy ratio.
"""

import numpy as np

from sourceverify.forensics.pixels import NEUTRAL_SCORE, as_rgba, clamp_score, is_too_small, luminance
from sourceverify.results import Signal

SPECTRAL_NYQUIST = "Spectral Nyquist"
SPECTRAL_NYQUIST_WEIGHT = 3.0
PATCH_SIZE = 64


def row_power_spectrum(patch: np.ndarray) -> np.ndarray:
    """Mean power per DFT bin 0..n//2 over the rows of a square patch."""
    spectrum = np.fft.rfft(patch, axis=1)
    return (np.abs(spectrum) ** 2).mean(axis=0)


def analyze_spectral_nyquist(pixels, w: int, h: int) -> Signal:
    if is_too_small(w, h):
        return Signal(SPECTRAL_NYQUIST, NEUTRAL_SCORE, SPECTRAL_NYQUIST_WEIGHT)

    size = min(PATCH_SIZE, w, h)
    ox, oy = (w - size) // 2, (h - size) // 2
    gray = luminance(as_rgba(pixels, w, h))
    patch = gray[oy:oy + size, ox:ox + size]

    hs = size // 2
    lp = np.log10(row_power_spectrum(patch) + 1)

    nyquist = float(lp[hs])
    near_avg = float(lp[hs - 3:hs].mean())
    peak_ratio = nyquist / near_avg if near_avg > 0 else 1.0

    low = float(lp[1:4].mean())
    high = float(lp[hs - 3:hs].mean())
    rolloff = high / low if low > 0 else 0.0

    score = 50
    if peak_ratio > 1.5:
        score += 20
    elif peak_ratio > 1.2:
        score += 10
    elif peak_ratio < 0.9:
        score -= 15

    if rolloff > 0.5:
        score += 15
    elif rolloff > 0.3:
        score += 5
    elif rolloff < 0.15:
        score -= 15
    elif rolloff < 0.2:
        score -= 5

    details = {"pr": round(peak_ratio, 3), "rr": round(rolloff, 3)}
    return Signal(SPECTRAL_NYQUIST, clamp_score(score, 10, 90), SPECTRAL_NYQUIST_WEIGHT, details)
