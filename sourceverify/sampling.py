"""
Pixel Sampler: decode image bytes into a capped-resolution RGBA buffer.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from sourceverify.errors import DecodeError
from sourceverify.utils import round_half_up

logger = logging.getLogger(__name__)

MAX_DIMENSION = 1024


@dataclass(frozen=True)
class SampledImage:
    pixels: np.ndarray  # (height, width, 4) uint8, read-only
    width: int
    height: int
    original_width: int
    original_height: int
    format: Optional[str] = None

    @property
    def downscaled(self) -> bool:
        return (self.width, self.height) != (self.original_width, self.original_height)


def scaled_size(width: int, height: int, max_dimension: int = MAX_DIMENSION) -> Tuple[int, int]:
    """Fit (width, height) inside max_dimension, keeping the aspect ratio."""
    if width <= max_dimension and height <= max_dimension:
        return width, height
    scale = max_dimension / max(width, height)
    return max(1, round_half_up(width * scale)), max(1, round_half_up(height * scale))


def sample_image(image_bytes: bytes, max_dimension: int = MAX_DIMENSION) -> SampledImage:
    """
    Decode and, if needed, downscale so the long edge equals max_dimension.

    Raises DecodeError for empty, unrecognised or corrupt data; the decoder
    is closed on every path.
    """
    if not image_bytes:
        raise DecodeError("Empty image data")

    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            fmt = img.format
            original_width, original_height = img.size
            img.load()
            rgba = img.convert("RGBA")
    except (UnidentifiedImageError, OSError, EOFError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        # Pillow messages can embed object addresses; keep them out of the error text
        logger.debug("Decoder failure: %s", e)
        raise DecodeError(f"Could not decode image ({type(e).__name__})") from e

    width, height = scaled_size(original_width, original_height, max_dimension)
    if (width, height) != (original_width, original_height):
        logger.debug("Downscaling %dx%d -> %dx%d", original_width, original_height, width, height)
        rgba = rgba.resize((width, height), Image.Resampling.BILINEAR)

    pixels = np.array(rgba, dtype=np.uint8)
    pixels.setflags(write=False)

    return SampledImage(pixels, width, height, original_width, original_height, fmt)
