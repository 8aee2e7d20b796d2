"""Helpers shared by the pixel-level signals."""

import numpy as np

# Signals skip block analysis below this size on either axis
MIN_DIMENSION = 16
NEUTRAL_SCORE = 50

LUMA_R, LUMA_G, LUMA_B = 0.299, 0.587, 0.114


def as_rgba(pixels, w: int, h: int) -> np.ndarray:
    """
    Return the buffer as an (h, w, 4) uint8 view.

    Accepts an (h, w, 4) array or any flat RGBA sequence of w*h*4 bytes
    (bytes, bytearray, memoryview, list or 1-D array).
    """
    if isinstance(pixels, np.ndarray):
        arr = pixels
    elif isinstance(pixels, (bytes, bytearray, memoryview)):
        arr = np.frombuffer(pixels, dtype=np.uint8)
    else:
        arr = np.asarray(pixels, dtype=np.uint8)

    if arr.shape == (h, w, 4):
        return arr
    if arr.size != w * h * 4:
        raise ValueError(f"Pixel buffer holds {arr.size} samples, expected {w}x{h}x4")
    return arr.reshape(h, w, 4)


def luminance(rgba: np.ndarray) -> np.ndarray:
    """Rec. 601 luma as float64, same weighting for every signal."""
    rgb = rgba[..., :3].astype(np.float64)
    return rgb[..., 0] * LUMA_R + rgb[..., 1] * LUMA_G + rgb[..., 2] * LUMA_B


def is_too_small(w: int, h: int) -> bool:
    return w < MIN_DIMENSION or h < MIN_DIMENSION


def clamp_score(score: float, low: int, high: int) -> int:
    return int(max(low, min(high, score)))


def block_stride(block_count: int, target: int) -> int:
    """Stride applied to both axes of a block grid; grows with the grid size."""
    return max(1, block_count // target)
