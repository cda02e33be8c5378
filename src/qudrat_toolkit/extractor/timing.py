"""
Module: extractor.timing

Purpose:
    Timing instrumentation for batch conversion, to see whether rendering,
    the text layer or OCR dominates a run.

Key Classes:
    - TimingLog: Collects batch-level and per-page timing metrics

Key Functions:
    - timed_phase: Context manager for timing code blocks

Dependencies:
    - time (std)
    - contextlib (std)
    - threading (std)

Used By:
    - extractor.page_processor: Per-page phases
    - extractor.pipeline: Per-document phases and the end-of-run summary
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Generator, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class TimingLog:
    """
    Timing metrics for a batch run.

    Attributes:
        batch_timings: Dict of phase_name -> duration_seconds
        page_timings: Dict of page_id -> {phase_name -> duration_seconds}

    Example:
        >>> log = TimingLog()
        >>> log.log_batch("page_count", 0.012)
        >>> log.log_page("quant_01.pdf#p2", "render", 0.140)
        >>> print(log.summary())
    """
    batch_timings: Dict[str, float] = field(default_factory=dict)
    page_timings: Dict[str, Dict[str, float]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def log_batch(self, phase: str, duration: float) -> None:
        """Log a batch-level timing metric; repeated phases accumulate."""
        with self._lock:
            self.batch_timings[phase] = self.batch_timings.get(phase, 0.0) + duration

    def log_page(self, page_id: str, phase: str, duration: float) -> None:
        """Log a page-level timing metric. Safe to call from worker threads."""
        with self._lock:
            self.page_timings.setdefault(page_id, {})[phase] = duration

    def get_phase_averages(self) -> Dict[str, float]:
        """Average time per phase across all pages."""
        totals: Dict[str, float] = {}
        counts: Dict[str, int] = {}
        with self._lock:
            for phases in self.page_timings.values():
                for phase, duration in phases.items():
                    totals[phase] = totals.get(phase, 0.0) + duration
                    counts[phase] = counts.get(phase, 0) + 1
        return {phase: totals[phase] / counts[phase] for phase in totals}

    def get_slowest_pages(self, n: int = 3) -> List[Tuple[str, float, str, float]]:
        """The N slowest pages as (page_id, total, slowest_phase, phase_duration)."""
        results = []
        with self._lock:
            for page_id, phases in self.page_timings.items():
                if not phases:
                    continue
                slowest = max(phases.items(), key=lambda x: x[1])
                results.append((page_id, sum(phases.values()), slowest[0], slowest[1]))
        results.sort(key=lambda x: x[1], reverse=True)
        return results[:n]

    def summary(self) -> str:
        """Generate human-readable timing summary."""
        lines = ["", "=== Conversion Timing Summary ==="]

        if self.batch_timings:
            lines.append("Batch-level:")
            for phase, duration in sorted(self.batch_timings.items()):
                lines.append(f"  {phase:25s} {duration:.3f}s")

        averages = self.get_phase_averages()
        if averages:
            lines.append("")
            lines.append("Page-level averages:")
            for phase, avg in sorted(averages.items(), key=lambda x: -x[1]):
                lines.append(f"  {phase:25s} {avg:.3f}s")

        slowest = self.get_slowest_pages(3)
        if slowest:
            lines.append("")
            lines.append("Slowest pages:")
            for page_id, total, slow_phase, slow_duration in slowest:
                lines.append(f"  {page_id}: {total:.3f}s ({slow_phase}: {slow_duration:.3f}s)")

        lines.append("")
        return "\n".join(lines)


@contextmanager
def timed_phase(
    log: Optional[TimingLog],
    phase: str,
    page_id: Optional[str] = None,
) -> Generator[None, None, None]:
    """
    Context manager for timing a code phase.

    Args:
        log: TimingLog to record into; None disables timing
        phase: Name of the phase being timed
        page_id: If provided, records as page-level metric;
                 otherwise records as batch-level metric

    Example:
        >>> log = TimingLog()
        >>> with timed_phase(log, "render", page_id="quant_01.pdf#p2"):
        ...     image = render_page(page)
    """
    if log is None:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if page_id:
            log.log_page(page_id, phase, elapsed)
        else:
            log.log_batch(phase, elapsed)
