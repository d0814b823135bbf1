"""Utilities for turning individual test outcomes into an overall verdict.

The :mod:`rngvalidator.tests` package runs the NIST primitives and returns
:class:`rngvalidator.tests.base.TestOutcome` objects. This module picks the
tier for a bitstream, runs the suite and condenses the outcomes into a single
quality score.

Two thresholds are important during the analysis stage:

``DEFAULT_SIGNIFICANCE_LEVEL``
    The per-test significance level (:math:`\\alpha`). A test is considered
    to *fail* when ``p_value < alpha``.

``DEFAULT_VALIDITY_THRESHOLD``
    The minimum quality score (``0.0`` to ``1.0``) the sequence must reach to
    be reported as valid.

The score mixes two signals. The pass rate dominates (weight ``0.8`` by
default). The remainder scores the average passing p-value by its distance
from ``0.5``: an average of ``0.5`` gives full marks, ``0.0`` or ``1.0``
gives none.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .tests.base import TestOutcome
from .tests.factory import DEFAULT_ALPHA, run_suite
from .tiers import TierDescriptor, require_tier

logger = logging.getLogger(__name__)

DEFAULT_SIGNIFICANCE_LEVEL: float = DEFAULT_ALPHA
"""Default :math:`\\alpha` used to evaluate individual tests."""

DEFAULT_VALIDITY_THRESHOLD: float = 0.8
"""Quality score at or above which a sequence is reported as valid."""

DEFAULT_PASS_RATE_WEIGHT: float = 0.8
"""Share of the score taken by the pass rate; p-value quality gets the rest."""


@dataclass(frozen=True)
class QualityScore:
    """Aggregate numbers derived from a set of outcomes.

    ``success_rate`` and ``p_value_quality`` are percentages in ``[0, 100]``;
    ``average_p_value`` is the plain mean over every outcome with a p-value.
    """

    tests_passed: int
    total_tests: int
    success_rate: float
    average_p_value: float
    p_value_quality: float = 0.0

    @property
    def quality_score(self) -> float:
        return self.success_rate / 100.0


@dataclass(frozen=True)
class SuiteResult:
    """Outcome of running the tiered suite on one bitstream."""

    tier: TierDescriptor
    bit_count: int
    outcomes: Tuple[TestOutcome, ...]
    score: QualityScore


def score_outcomes(
    outcomes: Sequence[TestOutcome],
    *,
    pass_rate_weight: float = DEFAULT_PASS_RATE_WEIGHT,
) -> QualityScore:
    """Combine ``outcomes`` into a :class:`QualityScore`.

    Parameters
    ----------
    outcomes:
        Test outcomes; only those carrying a p-value contribute to the
        p-value quality component.
    pass_rate_weight:
        Weight of the pass rate in ``[0, 1]``. The p-value quality receives
        ``1 - pass_rate_weight``.
    """

    total = len(outcomes)
    if total == 0:
        return QualityScore(
            tests_passed=0, total_tests=0, success_rate=0.0, average_p_value=0.0
        )

    passed = sum(1 for outcome in outcomes if outcome.passed)
    pass_rate = 100.0 * passed / total

    all_p_values = [o.p_value for o in outcomes if o.p_value is not None]
    average_p_value = float(np.mean(all_p_values)) if all_p_values else 0.0

    passing_p_values = np.asarray(
        [o.p_value for o in outcomes if o.passed and o.p_value is not None], dtype=float
    )
    if passing_p_values.size:
        average = float(passing_p_values.mean())
        p_value_quality = float(np.clip(100.0 * (1.0 - abs(average - 0.5) / 0.5), 0.0, 100.0))
    else:
        p_value_quality = 0.0

    success_rate = pass_rate_weight * pass_rate + (1.0 - pass_rate_weight) * p_value_quality
    return QualityScore(
        tests_passed=passed,
        total_tests=total,
        success_rate=success_rate,
        average_p_value=average_p_value,
        p_value_quality=p_value_quality,
    )


def is_valid(success_rate: float, threshold: float = DEFAULT_VALIDITY_THRESHOLD) -> bool:
    """Return whether a percentage ``success_rate`` meets ``threshold`` (a fraction)."""

    return success_rate / 100.0 >= threshold


def run_tiered_suite(
    bits: np.ndarray,
    *,
    alpha: float = DEFAULT_SIGNIFICANCE_LEVEL,
    pass_rate_weight: float = DEFAULT_PASS_RATE_WEIGHT,
) -> SuiteResult:
    """Select a tier for ``bits``, run its tests and score them.

    Raises :class:`~rngvalidator.errors.InsufficientDataError` when the
    bitstream is below the smallest tier.
    """

    bit_count = int(bits.size)
    tier = require_tier(bit_count)
    outcomes = run_suite(bits, tier, alpha=alpha)
    score = score_outcomes(outcomes, pass_rate_weight=pass_rate_weight)
    logger.info(
        "Tier %d suite: %d/%d tests passed, success rate %.2f%%",
        tier.level,
        score.tests_passed,
        score.total_tests,
        score.success_rate,
    )
    return SuiteResult(tier=tier, bit_count=bit_count, outcomes=tuple(outcomes), score=score)


__all__ = [
    "DEFAULT_PASS_RATE_WEIGHT",
    "DEFAULT_SIGNIFICANCE_LEVEL",
    "DEFAULT_VALIDITY_THRESHOLD",
    "QualityScore",
    "SuiteResult",
    "is_valid",
    "run_tiered_suite",
    "score_outcomes",
]
