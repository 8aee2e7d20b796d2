#!/usr/bin/env python3
"""
SourceVerify - AI-generated vs camera-captured image detection

Usage:
    python predict.py --input_dir /test_images --output_file predictions.json
    python predict.py --image /path/to/image.jpg --metadata exif --extended
"""

import argparse
import json
from pathlib import Path
from typing import Dict

from sourceverify import ALL_SIGNALS, Analyzer, AnalyzerSettings, DecodeError
from sourceverify.forensics.metadata import INSPECTORS

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp', '.gif', '.bmp'}


def process_image(image_path: Path, analyzer: Analyzer, include_details: bool = False) -> Dict:
    """Analyze a single image and return its prediction record."""
    result = analyzer.analyze(image_path.read_bytes(), image_path.name)
    record = {"image_name": image_path.name}
    record.update(result.as_dict(include_details))
    return record


def build_settings(args) -> AnalyzerSettings:
    if args.signals:
        names = [n.strip() for n in args.signals.split(",") if n.strip()]
    elif args.extended:
        names = ALL_SIGNALS
    else:
        names = None
    return AnalyzerSettings(
        enabled_signals=names,
        metadata_mode=args.metadata,
        max_workers=args.workers,
    )


def main():
    parser = argparse.ArgumentParser(description="Detect AI-generated images with forensic signals")
    parser.add_argument("--input_dir", type=str, help="Directory containing images to analyze")
    parser.add_argument("--image", type=str, help="Single image to analyze")
    parser.add_argument("--output_file", type=str, default="predictions.json", help="Output JSON file")
    parser.add_argument("--metadata", type=str, default="filename", choices=sorted(INSPECTORS),
                        help="Metadata inspector mode")
    parser.add_argument("--signals", type=str, help="Comma-separated signal names to run")
    parser.add_argument("--extended", action="store_true", help="Also run Benford, DCT and PRNU signals")
    parser.add_argument("--workers", type=int, default=1, help="Threads used for the signals of one image")
    parser.add_argument("--details", action="store_true", help="Include per-signal diagnostics")
    args = parser.parse_args()

    if not args.input_dir and not args.image:
        parser.error("Either --input_dir or --image must be provided")

    try:
        analyzer = Analyzer(build_settings(args))
    except ValueError as e:
        parser.error(str(e))

    if args.image:
        images = [Path(args.image)]
    else:
        input_path = Path(args.input_dir)
        images = sorted(f for f in input_path.rglob('*') if f.suffix.lower() in IMAGE_EXTENSIONS)

    print(f"Found {len(images)} images to process")
    print(f"Signals: {', '.join(analyzer.detector.signal_names)}")

    predictions = []
    for idx, img_path in enumerate(images):
        print(f"[{idx + 1}/{len(images)}] Processing: {img_path.name}")
        try:
            result = process_image(img_path, analyzer, args.details)
        except (DecodeError, OSError) as e:
            print(f"    Error processing {img_path.name}: {e}")
            predictions.append({"image_name": img_path.name, "verdict": "error", "error": str(e)})
            continue

        predictions.append(result)
        print(f"    Score: {result['aiScore']} ({result['verdict'].upper()}, "
              f"{result['confidence']}% confidence) in {result['processingTimeMs']}ms")

    output_path = Path(args.output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(predictions, f, indent=2)

    print(f"\nPredictions saved to {output_path}")

    verdicts = [p["verdict"] for p in predictions]
    if verdicts:
        print(f"\n=== Summary ===")
        print(f"Total images: {len(verdicts)}")
        print(f"AI generated: {verdicts.count('ai')}")
        print(f"Real: {verdicts.count('real')}")
        print(f"Uncertain: {verdicts.count('uncertain')}")
        if verdicts.count('error'):
            print(f"Errors: {verdicts.count('error')}")


if __name__ == "__main__":
    main()
