"""
Tests for the public entry point (sourceverify.analyze / Analyzer) and the
result record it assembles.
"""

from __future__ import annotations

import io

import pytest
from PIL import Image

import sourceverify
from conftest import encode, make_flat, make_gradient
from sourceverify import ALL_SIGNALS, CORE_SIGNALS, Analyzer, AnalyzerSettings, DecodeError, analyze
from sourceverify.analyzer import infer_format


def _stable(result) -> dict:
    record = result.as_dict(include_details=True)
    record.pop("processingTimeMs")
    return record


def test_record_fields(png_bytes):
    result = analyze(png_bytes, "photo.png")
    assert result.verdict in ("ai", "real", "uncertain")
    assert 0 <= result.confidence <= 100
    assert 3 <= result.ai_score <= 97
    assert [s.name for s in result.signals] == list(CORE_SIGNALS)
    assert result.processing_time_ms >= 0

    record = result.as_dict()
    assert set(record) == {"verdict", "confidence", "aiScore", "signals", "processingTimeMs", "imageInfo"}
    assert record["imageInfo"] == {"width": 160, "height": 120, "format": "PNG"}
    assert set(record["signals"][0]) == {"name", "score", "weight"}


def test_image_info_reports_original_size():
    data = encode(make_flat(1500, 300), "PNG")
    result = analyze(data, "wide.png")
    assert (result.image_info.width, result.image_info.height) == (1500, 300)


def test_flat_gray_leans_ai():
    result = analyze(encode(make_flat(64, 64), "PNG"), "gray.png")
    scores = {s.name: s.score for s in result.signals}
    assert scores["Noise Residual"] == 89
    assert scores["Color Correlation"] == 50
    assert result.verdict == "ai"


def test_ai_file_name_drives_verdict(png_bytes):
    named = analyze(png_bytes, "midjourney_v6.png")
    plain = analyze(png_bytes, "photo.png")
    assert named.signals[0].score == 95
    assert named.ai_score >= plain.ai_score


def test_deterministic(jpeg_bytes):
    assert _stable(analyze(jpeg_bytes, "a.jpg")) == _stable(analyze(jpeg_bytes, "a.jpg"))


def test_parallel_matches_serial(jpeg_bytes):
    serial = Analyzer(AnalyzerSettings(enabled_signals=ALL_SIGNALS))
    parallel = Analyzer(AnalyzerSettings(enabled_signals=ALL_SIGNALS, max_workers=4))
    assert _stable(serial.analyze(jpeg_bytes, "a.jpg")) == _stable(parallel.analyze(jpeg_bytes, "a.jpg"))


def test_enabled_subset(png_bytes):
    settings = AnalyzerSettings.with_signals(["Color Correlation", "Noise Residual"])
    result = analyze(png_bytes, "photo.png", settings)
    assert [s.name for s in result.signals] == ["Noise Residual", "Color Correlation"]


def test_empty_subset_is_neutral(png_bytes):
    result = analyze(png_bytes, "photo.png", AnalyzerSettings(enabled_signals=[]))
    assert result.signals == []
    assert (result.ai_score, result.verdict, result.confidence) == (50, "uncertain", 82)


def test_extended_signals(png_bytes):
    result = analyze(png_bytes, "photo.png", AnalyzerSettings(enabled_signals=ALL_SIGNALS))
    assert [s.name for s in result.signals] == list(ALL_SIGNALS)


@pytest.mark.parametrize("kwargs", [
    {"enabled_signals": ["Nope"]},
    {"metadata_mode": "xmp"},
    {"max_dimension": 0},
    {"max_workers": 0},
])
def test_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        AnalyzerSettings(**kwargs)


def test_decode_error_propagates():
    with pytest.raises(DecodeError):
        analyze(b"not an image", "broken.jpg")


def test_default_file_name(jpeg_bytes):
    result = analyze(jpeg_bytes)
    assert result.image_info.format == "JPEG"
    assert result.signals[0].score == 50


@pytest.mark.parametrize("file_name,decoded,expected", [
    ("x.png", "JPEG", "PNG"),
    ("x.JPEG", None, "JPEG"),
    ("x.webp", None, "WEBP"),
    ("noext", "PNG", "PNG"),
    ("", None, "JPEG"),
])
def test_infer_format(file_name, decoded, expected):
    assert infer_format(file_name, decoded) == expected


def test_exif_mode_reads_tags():
    img = Image.fromarray(make_gradient(64, 48)[..., :3], "RGB")
    exif = Image.Exif()
    exif[0x010F] = "Nikon"
    buf = io.BytesIO()
    img.save(buf, "JPEG", exif=exif)

    result = analyze(buf.getvalue(), "photo.jpg", AnalyzerSettings(metadata_mode="exif"))
    assert result.signals[0].score == 10


def test_public_exports():
    for name in sourceverify.__all__:
        assert hasattr(sourceverify, name)
