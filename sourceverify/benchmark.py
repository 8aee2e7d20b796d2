"""
Benchmark harness: run the analyzer over a labelled corpus and tabulate
detection statistics.

Labels come from the file naming convention: ``ai_*`` files are known
AI-generated images, ``real_*`` files are camera captures.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from time import perf_counter
from typing import Dict, Iterable, List, Optional, Tuple

from tqdm import tqdm

from sourceverify.analyzer import Analyzer
from sourceverify.errors import DecodeError
from sourceverify.results import VERDICT_AI, VERDICT_REAL, AnalysisResult

logger = logging.getLogger(__name__)

LABEL_AI = "ai"
LABEL_REAL = "real"
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}


def label_for(file_name: str) -> Optional[str]:
    name = Path(file_name).name.lower()
    if name.startswith("ai_"):
        return LABEL_AI
    if name.startswith("real_"):
        return LABEL_REAL
    return None


def collect_corpus(directory) -> List[Tuple[Path, str]]:
    """Labelled images in a directory: AI files first, then real, each sorted by name."""
    directory = Path(directory)
    files = sorted(f for f in directory.iterdir() if f.is_file() and f.suffix.lower() in IMAGE_EXTENSIONS)
    ai = [(f, LABEL_AI) for f in files if label_for(f.name) == LABEL_AI]
    real = [(f, LABEL_REAL) for f in files if label_for(f.name) == LABEL_REAL]
    return ai + real


@dataclass
class BenchmarkReport:
    ai_count: int = 0
    real_count: int = 0
    tp: int = 0
    fn: int = 0
    fp: int = 0
    tn: int = 0
    ai_uncertain: int = 0
    real_uncertain: int = 0
    elapsed_ms: float = 0.0
    misclassified: List[Dict] = field(default_factory=list)
    failures: List[Dict] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.tp + self.fn + self.fp + self.tn + self.ai_uncertain + self.real_uncertain

    @property
    def strict_total(self) -> int:
        return self.tp + self.fn + self.fp + self.tn

    @property
    def strict_accuracy(self) -> float:
        return (self.tp + self.tn) / self.strict_total if self.strict_total else 0.0

    @property
    def precision(self) -> float:
        return self.tp / (self.tp + self.fp) if (self.tp + self.fp) else 0.0

    @property
    def recall(self) -> float:
        return self.tp / (self.tp + self.fn) if (self.tp + self.fn) else 0.0

    @property
    def f1(self) -> float:
        p, r = self.precision, self.recall
        return 2 * p * r / (p + r) if (p + r) else 0.0

    @property
    def detection_rate(self) -> float:
        """Fraction of AI images that received the "ai" verdict."""
        return self.tp / self.ai_count if self.ai_count else 0.0

    @property
    def real_rate(self) -> float:
        return self.tn / self.real_count if self.real_count else 0.0

    @property
    def avg_ms(self) -> float:
        return self.elapsed_ms / self.total if self.total else 0.0

    def record(self, file_name: str, truth: str, result: AnalysisResult) -> None:
        verdict = result.verdict
        if truth == LABEL_AI:
            if verdict == VERDICT_AI:
                self.tp += 1
            elif verdict == VERDICT_REAL:
                self.fn += 1
            else:
                self.ai_uncertain += 1
        else:
            if verdict == VERDICT_REAL:
                self.tn += 1
            elif verdict == VERDICT_AI:
                self.fp += 1
            else:
                self.real_uncertain += 1

        wrong = (truth == LABEL_AI and verdict == VERDICT_REAL) or (truth == LABEL_REAL and verdict == VERDICT_AI)
        if wrong:
            self.misclassified.append({
                "file": file_name,
                "truth": truth,
                "verdict": verdict,
                "score": result.ai_score,
                "signals": [{"name": s.name, "score": s.score} for s in result.signals],
            })

    def as_dict(self, timestamp: Optional[str] = None) -> Dict:
        return {
            "timestamp": timestamp or datetime.now(timezone.utc).isoformat(),
            "elapsed_ms": round(self.elapsed_ms),
            "counts": {"ai": self.ai_count, "real": self.real_count, "total": self.total},
            "results": {
                "tp": self.tp, "fn": self.fn, "fp": self.fp, "tn": self.tn,
                "aiUncertain": self.ai_uncertain, "realUncertain": self.real_uncertain,
            },
            "metrics": {
                "strictAccuracy": self.strict_accuracy,
                "precision": self.precision,
                "recall": self.recall,
                "f1": self.f1,
                "detectionRate": self.detection_rate,
                "avgMs": self.avg_ms,
            },
            "errors": self.misclassified,
            "failures": self.failures,
        }


def detail_line(file_name: str, truth: str, result: AnalysisResult) -> str:
    """One line of the per-image detail log: FILE | TRUTH | VERDICT | SCORE | CONF | signals."""
    if result.verdict == truth:
        mark = "OK"
    elif result.verdict in (VERDICT_AI, VERDICT_REAL):
        mark = "FN" if truth == LABEL_AI else "FP"
    else:
        mark = "?"

    parts = []
    for s in result.signals:
        extra = ",".join(f"{k}={v}" for k, v in s.details.items())
        parts.append(f"{s.name}:{s.score}" + (f"({extra})" if extra else ""))
    return (f"{mark} {file_name} | {truth.upper()} | {result.verdict} | {result.ai_score} | "
            f"{result.confidence}% | " + " | ".join(parts))


def format_report(report: BenchmarkReport) -> str:
    lines = [
        "=" * 60,
        "BENCHMARK RESULTS",
        "=" * 60,
        f"Total: {report.total} images in {report.elapsed_ms / 1000:.1f}s ({report.avg_ms:.0f}ms/img)",
        "",
        f"AI ({report.ai_count}):   TP={report.tp} ({report.detection_rate * 100:.1f}%)  "
        f"FN={report.fn}  Unc={report.ai_uncertain}",
        f"Real ({report.real_count}): TN={report.tn} ({report.real_rate * 100:.1f}%)  "
        f"FP={report.fp}  Unc={report.real_uncertain}",
        "",
        f"Strict Accuracy: {report.strict_accuracy * 100:.1f}% ({report.tp + report.tn}/{report.strict_total})",
        f"Precision:       {report.precision * 100:.1f}%",
        f"Recall:          {report.recall * 100:.1f}%",
        f"F1-Score:        {report.f1 * 100:.1f}%",
        "=" * 60,
    ]
    if report.failures:
        lines.append(f"Skipped files: {len(report.failures)}")
    return "\n".join(lines)


def _analyze_file(analyzer: Analyzer, path: Path):
    try:
        data = path.read_bytes()
    except OSError as e:
        return None, f"Could not read file ({e.strerror or type(e).__name__})"
    try:
        return analyzer.analyze(data, path.name), None
    except DecodeError as e:
        return None, str(e)


def run_benchmark(corpus: Iterable[Tuple[Path, str]], analyzer: Optional[Analyzer] = None,
                  workers: int = 1, progress: bool = True,
                  detail_lines: Optional[List[str]] = None) -> BenchmarkReport:
    """
    Analyze every (path, label) pair and tally the outcome.

    Files are analyzed concurrently up to `workers`; results are tallied in
    corpus order so the report does not depend on scheduling.
    """
    analyzer = analyzer or Analyzer()
    corpus = [(Path(p), label) for p, label in corpus]
    report = BenchmarkReport(
        ai_count=sum(1 for _, label in corpus if label == LABEL_AI),
        real_count=sum(1 for _, label in corpus if label == LABEL_REAL),
    )

    start = perf_counter()
    paths = [p for p, _ in corpus]
    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = pool.map(lambda p: _analyze_file(analyzer, p), paths)
            outcomes = list(tqdm(outcomes, total=len(paths), disable=not progress, desc="Benchmark"))
    else:
        outcomes = [_analyze_file(analyzer, p) for p in tqdm(paths, disable=not progress, desc="Benchmark")]

    for (path, truth), (result, error) in zip(corpus, outcomes):
        if result is None:
            logger.warning("Skipping %s: %s", path.name, error)
            report.failures.append({"file": path.name, "error": error})
            if truth == LABEL_AI:
                report.ai_count -= 1
            else:
                report.real_count -= 1
            continue
        report.record(path.name, truth, result)
        if detail_lines is not None:
            detail_lines.append(detail_line(path.name, truth, result))

    report.elapsed_ms = (perf_counter() - start) * 1000
    return report
