"""
Pytest fixtures for SourceVerify tests. Synthetic RGBA buffers built with
numpy and encoded with Pillow, so no sample images are needed on disk.
"""

from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image


def make_flat(width: int, height: int, value: int = 128) -> np.ndarray:
    pixels = np.full((height, width, 4), value, dtype=np.uint8)
    pixels[..., 3] = 255
    return pixels


def make_noisy(width: int, height: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    pixels[..., 3] = 255
    return pixels


def make_gradient(width: int, height: int, seed: int = 1) -> np.ndarray:
    """Smooth horizontal ramp with mild per-channel grain, closer to a photo than pure noise."""
    rng = np.random.default_rng(seed)
    ramp = np.linspace(30, 220, width)[None, :, None]
    base = np.repeat(np.repeat(ramp, height, axis=0), 3, axis=2)
    grain = rng.normal(0, 4, size=(height, width, 3))
    rgb = np.clip(base + grain, 0, 255).astype(np.uint8)
    alpha = np.full((height, width, 1), 255, dtype=np.uint8)
    return np.concatenate([rgb, alpha], axis=2)


def encode(pixels: np.ndarray, fmt: str = "PNG", **save_kwargs) -> bytes:
    buf = io.BytesIO()
    img = Image.fromarray(pixels, "RGBA")
    if fmt == "JPEG":
        img = img.convert("RGB")
    img.save(buf, fmt, **save_kwargs)
    return buf.getvalue()


@pytest.fixture
def flat_gray() -> np.ndarray:
    """64x64 mid-gray buffer, fully opaque."""
    return make_flat(64, 64)


@pytest.fixture
def noisy_pixels() -> np.ndarray:
    return make_noisy(128, 128)


@pytest.fixture
def gradient_pixels() -> np.ndarray:
    return make_gradient(160, 120)


@pytest.fixture
def png_bytes(gradient_pixels) -> bytes:
    return encode(gradient_pixels, "PNG")


@pytest.fixture
def jpeg_bytes(gradient_pixels) -> bytes:
    return encode(gradient_pixels, "JPEG", quality=90)
