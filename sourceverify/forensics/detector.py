"""
Forensic signal catalogue and runner.

Pixel-level analysis for detecting AI generation: each signal is a pure
function of the shared read-only pixel buffer, so they can run in any order
or in parallel.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from sourceverify.forensics.color import COLOR_CORRELATION, COLOR_CORRELATION_WEIGHT, analyze_color_correlation
from sourceverify.forensics.edges import EDGE_COHERENCE, EDGE_COHERENCE_WEIGHT, analyze_edge_coherence
from sourceverify.forensics.metadata import METADATA_ANALYSIS, METADATA_WEIGHT, get_inspector
from sourceverify.forensics.noise import (
    NOISE_RESIDUAL,
    NOISE_RESIDUAL_WEIGHT,
    PRNU,
    PRNU_WEIGHT,
    analyze_noise_residual,
    analyze_prnu,
)
from sourceverify.forensics.spectral import SPECTRAL_NYQUIST, SPECTRAL_NYQUIST_WEIGHT, analyze_spectral_nyquist
from sourceverify.forensics.statistics import (
    BENFORD,
    BENFORD_WEIGHT,
    DCT_BLOCK_BOUNDARY,
    DCT_BLOCK_BOUNDARY_WEIGHT,
    analyze_benford,
    analyze_dct_block_boundary,
)
from sourceverify.forensics.texture import (
    GRADIENT_MICRO_TEXTURE,
    GRADIENT_MICRO_TEXTURE_WEIGHT,
    analyze_gradient_micro_texture,
)
from sourceverify.results import Signal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignalSpec:
    name: str
    weight: float
    func: Optional[Callable] = None  # None for Metadata Analysis, which uses an inspector
    extended: bool = False


CATALOGUE = (
    SignalSpec(METADATA_ANALYSIS, METADATA_WEIGHT),
    SignalSpec(SPECTRAL_NYQUIST, SPECTRAL_NYQUIST_WEIGHT, analyze_spectral_nyquist),
    SignalSpec(NOISE_RESIDUAL, NOISE_RESIDUAL_WEIGHT, analyze_noise_residual),
    SignalSpec(EDGE_COHERENCE, EDGE_COHERENCE_WEIGHT, analyze_edge_coherence),
    SignalSpec(GRADIENT_MICRO_TEXTURE, GRADIENT_MICRO_TEXTURE_WEIGHT, analyze_gradient_micro_texture),
    SignalSpec(COLOR_CORRELATION, COLOR_CORRELATION_WEIGHT, analyze_color_correlation),
    SignalSpec(BENFORD, BENFORD_WEIGHT, analyze_benford, extended=True),
    SignalSpec(DCT_BLOCK_BOUNDARY, DCT_BLOCK_BOUNDARY_WEIGHT, analyze_dct_block_boundary, extended=True),
    SignalSpec(PRNU, PRNU_WEIGHT, analyze_prnu, extended=True),
)

CORE_SIGNALS = tuple(spec.name for spec in CATALOGUE if not spec.extended)
EXTENDED_SIGNALS = tuple(spec.name for spec in CATALOGUE if spec.extended)
ALL_SIGNALS = CORE_SIGNALS + EXTENDED_SIGNALS


def select_signals(enabled: Optional[Iterable[str]] = None) -> List[SignalSpec]:
    """
    Catalogue entries to run, in catalogue order.

    None selects the core six. Unknown names raise ValueError.
    """
    if enabled is None:
        return [spec for spec in CATALOGUE if not spec.extended]

    wanted = set(enabled)
    unknown = wanted.difference(ALL_SIGNALS)
    if unknown:
        raise ValueError(f"Unknown signal(s): {', '.join(sorted(unknown))}")
    return [spec for spec in CATALOGUE if spec.name in wanted]


class ForensicDetector:
    """Runs the selected signals over one pixel buffer."""

    def __init__(self, enabled: Optional[Iterable[str]] = None, metadata_mode: str = "filename", max_workers: int = 1):
        self.specs = select_signals(enabled)
        self.inspector = get_inspector(metadata_mode)
        self.max_workers = max(1, int(max_workers))

    @property
    def signal_names(self) -> List[str]:
        return [spec.name for spec in self.specs]

    def _run(self, spec: SignalSpec, pixels, w: int, h: int, file_name: str, image_bytes) -> Signal:
        if spec.func is None:
            return self.inspector.inspect(file_name, image_bytes)
        return spec.func(pixels, w, h)

    def analyze(self, pixels, w: int, h: int, file_name: str = "", image_bytes: Optional[bytes] = None) -> List[Signal]:
        """Return one Signal per enabled catalogue entry, in catalogue order."""
        if self.max_workers == 1 or len(self.specs) < 2:
            signals = [self._run(spec, pixels, w, h, file_name, image_bytes) for spec in self.specs]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [
                    pool.submit(self._run, spec, pixels, w, h, file_name, image_bytes)
                    for spec in self.specs
                ]
                signals = [f.result() for f in futures]

        logger.debug("Signals for %s: %s", file_name or "<unnamed>", ", ".join(f"{s.name}={s.score}" for s in signals))
        return signals
