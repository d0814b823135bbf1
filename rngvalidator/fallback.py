"""Simplified heuristics for bitstreams too short for the NIST suite."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Tuple

import numpy as np
from scipy import special, stats

from .tests.base import TestOutcome
from .tests.utils import run_lengths

logger = logging.getLogger(__name__)

PASS_STATISTIC = 2.0
POKER_CHI_SQUARE_LIMIT = 25.0
AUTOCORRELATION_LIMIT = 0.15
ALTERNATION_LIMIT = 0.9
REPEAT_BLOCK_SIZE = 8


@dataclass(frozen=True)
class HeuristicOutcome(TestOutcome):
    """Outcome of a small-sample heuristic together with its raw statistic."""

    statistic: float = 0.0


@dataclass(frozen=True)
class FallbackReport:
    bit_count: int
    tests: Tuple[HeuristicOutcome, ...]

    @property
    def total_tests(self) -> int:
        return len(self.tests)

    @property
    def tests_passed(self) -> int:
        return sum(1 for test in self.tests if test.passed)

    @property
    def pass_rate(self) -> float:
        if not self.tests:
            return 0.0
        return 100.0 * self.tests_passed / self.total_tests

    @property
    def quality_score(self) -> float:
        return self.pass_rate / 100.0


def _outcome(
    name: str,
    passed: bool,
    statistic: float,
    description: str,
    p_value: float | None = None,
) -> HeuristicOutcome:
    return HeuristicOutcome(
        name=name,
        passed=bool(passed),
        p_values=() if p_value is None else (float(p_value),),
        description=description,
        statistic=float(statistic),
    )


def frequency_check(bits: np.ndarray) -> HeuristicOutcome:
    name = "Frequency Test"
    n = int(bits.size)
    if n == 0:
        return _outcome(name, False, 0.0, "No data")
    ones = int(np.count_nonzero(bits))
    zeros = n - ones
    statistic = abs(ones - zeros) / math.sqrt(n)
    return _outcome(
        name,
        statistic < PASS_STATISTIC,
        statistic,
        f"Ones: {ones}, Zeros: {zeros}, Ratio: {ones / n:.3f} (expect ~0.500)",
        special.erfc(statistic / math.sqrt(2)),
    )


def runs_check(bits: np.ndarray) -> HeuristicOutcome:
    name = "Runs Test"
    n = int(bits.size)
    if n < 2:
        return _outcome(name, False, 0.0, "Insufficient data")
    proportion = float(bits.mean())
    runs = int(run_lengths(bits).size)
    spread = 2.0 * n * proportion * (1.0 - proportion)
    expected = spread + 1.0
    variance = spread * (spread - 1.0) / (n - 1)
    statistic = abs(runs - expected) / math.sqrt(variance) if variance > 0 else 0.0
    return _outcome(
        name,
        statistic < PASS_STATISTIC,
        statistic,
        f"Observed runs: {runs}, Expected: {expected:.1f}, Statistic: {statistic:.3f}",
        special.erfc(statistic / math.sqrt(2)),
    )


def longest_run_check(bits: np.ndarray) -> HeuristicOutcome:
    name = "Longest Run Test"
    n = int(bits.size)
    if n == 0:
        return _outcome(name, False, 0.0, "No data")
    longest = int(run_lengths(bits).max())
    expected = math.ceil(math.log2(n) * 1.5)
    passed = longest <= expected * 2
    verdict = "within normal range" if passed else "suspiciously long"
    return _outcome(
        name,
        passed,
        longest,
        f"Longest run: {longest}, Expected: ~{expected}, {verdict}",
    )


def poker_check(bits: np.ndarray) -> HeuristicOutcome:
    name = "Poker Test (Pattern Distribution)"
    n = int(bits.size)
    if n < 4:
        return _outcome(name, False, 0.0, "Insufficient data (need at least 4 bits)")
    blocks = n // 4
    values = bits[: blocks * 4].reshape(blocks, 4).astype(np.int64) @ np.array([8, 4, 2, 1])
    counts = np.bincount(values, minlength=16)
    observed = counts[counts > 0]
    expected = blocks / 16.0
    # Patterns that never occur do not contribute to the statistic.
    chi_square = float(np.sum((observed - expected) ** 2 / expected))
    return _outcome(
        name,
        chi_square < POKER_CHI_SQUARE_LIMIT and blocks >= 4,
        chi_square,
        f"Patterns found: {observed.size}/16, Chi-square: {chi_square:.2f}, {blocks} blocks analyzed",
        stats.chi2.sf(chi_square, 15),
    )


def autocorrelation_check(bits: np.ndarray) -> HeuristicOutcome:
    name = "Autocorrelation Test"
    n = int(bits.size)
    if n < 10:
        return _outcome(name, False, 0.0, "Insufficient data (need at least 10 bits)")
    deviation = 0.0
    z_score = 0.0
    for lag in range(1, min(2, n // 4) + 1):
        pairs = n - lag
        agreement = float(np.count_nonzero(bits[:-lag] == bits[lag:])) / pairs
        if abs(agreement - 0.5) >= deviation:
            deviation = abs(agreement - 0.5)
            z_score = 2.0 * deviation * math.sqrt(pairs)
    return _outcome(
        name,
        deviation < AUTOCORRELATION_LIMIT,
        deviation,
        f"Max autocorrelation deviation: {deviation:.3f} (expect < {AUTOCORRELATION_LIMIT} for randomness)",
        special.erfc(z_score / math.sqrt(2)),
    )


def has_repeating_blocks(bits: np.ndarray, block_size: int = REPEAT_BLOCK_SIZE) -> bool:
    """Return whether any ``block_size`` window is immediately followed by a copy of itself."""

    n = int(bits.size)
    if n < 2 * block_size:
        return False
    for start in range(n - 2 * block_size):
        if np.array_equal(
            bits[start : start + block_size],
            bits[start + block_size : start + 2 * block_size],
        ):
            return True
    return False


def pattern_check(bits: np.ndarray) -> HeuristicOutcome:
    name = "Pattern Distribution Test"
    n = int(bits.size)
    if n < 8:
        return _outcome(name, False, 0.0, "Insufficient data")
    issues: List[str] = []
    longest = int(run_lengths(bits).max())
    if longest > max(n // 4, 8):
        issues.append(f"{longest} consecutive identical bits")
    alternation = float(np.count_nonzero(np.diff(bits.astype(np.int8)))) / n
    if alternation > ALTERNATION_LIMIT:
        issues.append(f"{alternation * 100:.0f}% alternating pattern")
    if has_repeating_blocks(bits):
        issues.append("Repeating block pattern detected")
    if issues:
        description = "Issues found: " + "; ".join(issues)
    else:
        description = "No obvious non-random patterns detected"
    return _outcome(name, not issues, len(issues), description)


HEURISTICS: Tuple[Callable[[np.ndarray], HeuristicOutcome], ...] = (
    frequency_check,
    runs_check,
    longest_run_check,
    poker_check,
    autocorrelation_check,
    pattern_check,
)


def run_fallback_analysis(bits: np.ndarray) -> FallbackReport:
    """Run the six small-sample heuristics, in order, on ``bits``."""

    bits = np.asarray(bits, dtype=np.uint8)
    outcomes = tuple(check(bits) for check in HEURISTICS)
    report = FallbackReport(bit_count=int(bits.size), tests=outcomes)
    logger.info(
        "Fallback analysis on %d bits: %d/%d heuristics passed",
        report.bit_count,
        report.tests_passed,
        report.total_tests,
    )
    return report


__all__ = [
    "FallbackReport",
    "HEURISTICS",
    "HeuristicOutcome",
    "autocorrelation_check",
    "frequency_check",
    "has_repeating_blocks",
    "longest_run_check",
    "pattern_check",
    "poker_check",
    "run_fallback_analysis",
    "runs_check",
]
