"""
Metadata Analysis: generator and camera fingerprints outside the pixels.

All inspectors share one contract. The filename inspector matches the
uploaded file name against known tool and camera names. The file-size
inspector adds the large-PNG rule used by the benchmark. The EXIF inspector
also reads the embedded tags and PNG text chunks with Pillow.
"""

import io
import logging
import os
import re
from typing import Dict, Optional

from PIL import ExifTags, Image

from sourceverify.results import Signal

logger = logging.getLogger(__name__)

METADATA_ANALYSIS = "Metadata Analysis"
METADATA_WEIGHT = 1.5

SCORE_AI_TOOL = 95
SCORE_CAMERA = 10
SCORE_NEUTRAL = 50
SCORE_RICH_EXIF = 18
SCORE_SOME_EXIF = 35

AI_SIGNATURES = (
    "midjourney", "dall-e", "dalle", "stable diffusion", "comfyui", "automatic1111",
    "novelai", "civitai", "adobe firefly", "firefly", "bing image creator", "leonardo ai",
    "flux", "sora", "runway", "pika", "ideogram", "recraft", "grok", "gemini", "imagen",
    "copilot designer", "meta ai", "stability ai", "sdxl", "sd3",
)
CAMERA_SIGNATURES = (
    "canon", "nikon", "sony", "fujifilm", "olympus", "panasonic", "leica", "hasselblad",
    "pentax", "samsung", "apple", "google pixel", "huawei", "xiaomi",
)

# Wider lists used when real metadata is available
EXTENDED_AI_SIGNATURES = AI_SIGNATURES + (
    "a1111", "invoke ai", "playground ai", "deep dream", "artbreeder", "nightcafe",
    "craiyon", "dreamstudio", "kling", "hailuo", "luma dream", "minimax", "genmo",
    "kandinsky", "wuerstchen", "pixart", "deepfloyd", "kolors", "hunyuan", "cogview",
    "glide", "veo", "lumiere", "dream machine", "emu",
)
EXTENDED_CAMERA_SIGNATURES = CAMERA_SIGNATURES + (
    "oppo", "oneplus", "vivo", "realme", "motorola", "nokia", "dji", "gopro", "ricoh",
    "sigma", "phase one", "red", "blackmagic", "arri",
)

EXIF_IFD_POINTER = 0x8769
CAMERA_TAGS = ("Make", "Model", "LensMake", "LensModel")

LARGE_PNG_BYTES = 2 * 1024 * 1024
LARGE_PNG_BONUS = 10


def _find_signature(text: str, signatures) -> Optional[str]:
    for sig in signatures:
        if sig in text:
            return sig
    return None


def _find_word(text: str, signatures) -> Optional[str]:
    """Like _find_signature, but only whole words count (so "lemur" is not "emu")."""
    for sig in signatures:
        if re.search(rf"\b{re.escape(sig)}\b", text):
            return sig
    return None


def analyze_metadata(file_name: str) -> Signal:
    """Filename heuristic: 95 for an AI tool name, 10 for a camera brand, else 50."""
    name = (file_name or "").lower()
    tool = _find_signature(name, AI_SIGNATURES)
    if tool:
        return Signal(METADATA_ANALYSIS, SCORE_AI_TOOL, METADATA_WEIGHT, {"match": tool})
    camera = _find_signature(name, CAMERA_SIGNATURES)
    if camera:
        return Signal(METADATA_ANALYSIS, SCORE_CAMERA, METADATA_WEIGHT, {"match": camera})
    return Signal(METADATA_ANALYSIS, SCORE_NEUTRAL, METADATA_WEIGHT)


def _to_text(value) -> str:
    if isinstance(value, bytes):
        return value.decode("latin-1", errors="ignore")
    return str(value)


def read_metadata(image_bytes: bytes) -> Dict[str, str]:
    """
    Collect EXIF tags (IFD0 and the Exif sub-IFD) plus textual info chunks.

    Returns an empty dict when nothing can be read; metadata problems are
    never fatal for the analysis.
    """
    tags: Dict[str, str] = {}
    if not image_bytes:
        return tags
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            exif = img.getexif()
            entries = dict(exif.items())
            entries.update(exif.get_ifd(EXIF_IFD_POINTER))
            for key, value in entries.items():
                tags[ExifTags.TAGS.get(key, str(key))] = _to_text(value)
            for key, value in img.info.items():
                if isinstance(value, (str, bytes)) and key != "exif":
                    tags[f"info:{key}"] = _to_text(value)
    except Exception as e:
        logger.debug("Metadata unreadable, treating as absent: %s", e)
        return {}
    return tags


class MetadataInspector:
    """Produces the Metadata Analysis signal for one upload."""

    mode = None

    def inspect(self, file_name: str, image_bytes: Optional[bytes] = None) -> Signal:
        raise NotImplementedError


class FilenameMetadataInspector(MetadataInspector):
    """Server fallback: only the file name is consulted."""

    mode = "filename"

    def inspect(self, file_name: str, image_bytes: Optional[bytes] = None) -> Signal:
        return analyze_metadata(file_name)


class FileSizeMetadataInspector(FilenameMetadataInspector):
    """Filename heuristic, plus 10 points (capped at 95) for PNG uploads over 2 MiB."""

    mode = "filesize"

    def inspect(self, file_name: str, image_bytes: Optional[bytes] = None) -> Signal:
        signal = analyze_metadata(file_name)
        size = len(image_bytes) if image_bytes else 0
        if os.path.splitext(file_name or "")[1].lower() != ".png" or size <= LARGE_PNG_BYTES:
            return signal
        score = min(signal.score + LARGE_PNG_BONUS, SCORE_AI_TOOL)
        return Signal(METADATA_ANALYSIS, score, METADATA_WEIGHT, dict(signal.details, largePng=True))


class ExifMetadataInspector(MetadataInspector):
    """Reads real EXIF/software tags; the file name still counts for AI tools."""

    mode = "exif"

    def inspect(self, file_name: str, image_bytes: Optional[bytes] = None) -> Signal:
        tags = read_metadata(image_bytes)
        values = " ".join(tags.values()).lower()
        camera_values = " ".join(tags.get(key, "") for key in CAMERA_TAGS).lower()
        name = (file_name or "").lower()

        tool = _find_signature(name, EXTENDED_AI_SIGNATURES) or _find_word(values, EXTENDED_AI_SIGNATURES)
        if tool:
            return Signal(METADATA_ANALYSIS, SCORE_AI_TOOL, METADATA_WEIGHT, {"match": tool})

        camera = _find_word(camera_values, EXTENDED_CAMERA_SIGNATURES)
        if camera:
            return Signal(METADATA_ANALYSIS, SCORE_CAMERA, METADATA_WEIGHT, {"match": camera})

        exif_fields = sum(1 for key in tags if not key.startswith("info:"))
        if exif_fields >= 3:
            score = SCORE_RICH_EXIF
        elif exif_fields >= 1:
            score = SCORE_SOME_EXIF
        else:
            score = SCORE_NEUTRAL
        return Signal(METADATA_ANALYSIS, score, METADATA_WEIGHT, {"exifFields": exif_fields})


INSPECTORS = {
    FilenameMetadataInspector.mode: FilenameMetadataInspector,
    FileSizeMetadataInspector.mode: FileSizeMetadataInspector,
    ExifMetadataInspector.mode: ExifMetadataInspector,
}


def get_inspector(mode: str = "filename") -> MetadataInspector:
    try:
        return INSPECTORS[mode]()
    except KeyError:
        raise ValueError(f"Unknown metadata mode {mode!r}, expected one of {sorted(INSPECTORS)}")
