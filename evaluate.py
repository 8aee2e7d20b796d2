#!/usr/bin/env python3
"""
Benchmark the detector on a labelled corpus.

File names starting with ai_ are AI-generated, real_ are camera captures.

Usage:
    python evaluate.py --data_dir bench/images --output_file bench/results.json
    python evaluate.py --data_dir bench/images --extended --workers 4 --detail_log detail.log
"""

import argparse
import json
import logging
from pathlib import Path

from sourceverify import ALL_SIGNALS, Analyzer, AnalyzerSettings
from sourceverify.benchmark import collect_corpus, format_report, run_benchmark
from sourceverify.forensics.metadata import INSPECTORS


def main():
    parser = argparse.ArgumentParser(description="Evaluate detection accuracy on ai_/real_ labelled images")
    parser.add_argument("--data_dir", type=str, required=True, help="Directory of ai_* and real_* images")
    parser.add_argument("--output_file", type=str, default="results.json", help="Results JSON")
    parser.add_argument("--detail_log", type=str, help="Write one line per image with every signal score")
    parser.add_argument("--log_file", type=str, help="Write the summary and warnings to this log file")
    parser.add_argument("--metadata", type=str, default="filename", choices=sorted(INSPECTORS))
    parser.add_argument("--extended", action="store_true", help="Also run Benford, DCT and PRNU signals")
    parser.add_argument("--workers", type=int, default=1, help="Images analyzed concurrently")
    parser.add_argument("--no_progress", action="store_true")
    args = parser.parse_args()

    if args.log_file:
        logging.basicConfig(filename=args.log_file, level=logging.INFO,
                            format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    settings = AnalyzerSettings(
        enabled_signals=ALL_SIGNALS if args.extended else None,
        metadata_mode=args.metadata,
    )
    analyzer = Analyzer(settings)

    corpus = collect_corpus(args.data_dir)
    ai_count = sum(1 for _, label in corpus if label == "ai")
    print(f"Testing {ai_count} AI + {len(corpus) - ai_count} real images")
    print(f"Signals: {', '.join(analyzer.detector.signal_names)}\n")
    if not corpus:
        parser.error(f"No ai_* or real_* images found in {args.data_dir}")

    detail_lines = [] if args.detail_log else None
    report = run_benchmark(corpus, analyzer, workers=args.workers,
                           progress=not args.no_progress, detail_lines=detail_lines)

    summary = format_report(report)
    print(summary)
    logging.getLogger("evaluate").info("\n%s", summary)

    output_path = Path(args.output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(report.as_dict(), f, indent=2)
    print(f"\nResults saved to {output_path}")

    if detail_lines is not None:
        Path(args.detail_log).write_text("\n".join(detail_lines) + "\n")
        print(f"Detail log saved to {args.detail_log}")

    if report.misclassified:
        print(f"\nMisclassified ({len(report.misclassified)}):")
        for e in report.misclassified:
            print(f"  {e['truth'].upper()} {e['file']}: {e['verdict']} ({e['score']})")


if __name__ == "__main__":
    main()
