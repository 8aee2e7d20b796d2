"""
Tests for decoding and downscaling (sourceverify.sampling).
"""

from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from conftest import encode, make_flat, make_noisy
from sourceverify.errors import DecodeError, SourceVerifyError
from sourceverify.sampling import MAX_DIMENSION, sample_image, scaled_size


@pytest.mark.parametrize("size,expected", [
    ((800, 600), (800, 600)),
    ((1024, 1024), (1024, 1024)),
    ((2048, 1024), (1024, 512)),
    ((3000, 1000), (1024, 341)),
    ((1000, 3000), (341, 1024)),
    ((5000, 2), (1024, 1)),
])
def test_scaled_size(size, expected):
    assert scaled_size(*size) == expected


def test_small_image_is_not_resized(png_bytes):
    sampled = sample_image(png_bytes)
    assert (sampled.width, sampled.height) == (160, 120)
    assert (sampled.original_width, sampled.original_height) == (160, 120)
    assert not sampled.downscaled
    assert sampled.format == "PNG"


def test_large_image_is_downscaled():
    data = encode(make_flat(2400, 1200), "PNG")
    sampled = sample_image(data)
    assert (sampled.width, sampled.height) == (MAX_DIMENSION, 512)
    assert (sampled.original_width, sampled.original_height) == (2400, 1200)
    assert sampled.downscaled
    assert sampled.pixels.shape == (512, MAX_DIMENSION, 4)


def test_custom_max_dimension(png_bytes):
    sampled = sample_image(png_bytes, max_dimension=80)
    assert (sampled.width, sampled.height) == (80, 60)


def test_pixels_are_rgba_and_read_only(jpeg_bytes):
    sampled = sample_image(jpeg_bytes)
    assert sampled.pixels.dtype == np.uint8
    assert sampled.pixels.shape == (120, 160, 4)
    assert np.all(sampled.pixels[..., 3] == 255)
    assert not sampled.pixels.flags.writeable
    with pytest.raises(ValueError):
        sampled.pixels[0, 0, 0] = 1


def test_grayscale_is_expanded():
    buf = io.BytesIO()
    Image.new("L", (40, 30), 90).save(buf, "PNG")
    sampled = sample_image(buf.getvalue())
    assert sampled.pixels.shape == (30, 40, 4)
    assert sampled.pixels[0, 0].tolist() == [90, 90, 90, 255]


@pytest.mark.parametrize("data", [b"", b"definitely not an image", b"\x89PNG\r\n\x1a\n" + bytes(20)])
def test_undecodable_bytes(data):
    with pytest.raises(DecodeError):
        sample_image(data)


def test_truncated_jpeg():
    data = encode(make_noisy(200, 200), "JPEG", quality=95)
    with pytest.raises(DecodeError):
        sample_image(data[: len(data) // 3])


def test_decode_error_is_library_error():
    with pytest.raises(SourceVerifyError):
        sample_image(b"garbage")


def test_decode_error_text_is_stable():
    """The message must not carry decoder object addresses."""
    messages = set()
    for _ in range(2):
        with pytest.raises(DecodeError) as excinfo:
            sample_image(b"definitely not an image")
        messages.add(str(excinfo.value))
    assert len(messages) == 1
    assert "0x" not in messages.pop()
