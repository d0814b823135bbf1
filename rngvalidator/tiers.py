"""Data-size tiers that decide which statistical tests are run."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from .errors import InsufficientDataError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TierDescriptor:
    level: int
    name: str
    description: str
    min_bits: int
    recommended_bits: int


TIERS: Tuple[TierDescriptor, ...] = (
    TierDescriptor(1, "Minimal", "Basic tests (Frequency, Runs, FFT)", 100, 1_000),
    TierDescriptor(2, "Light", "Basic + Block tests", 1_000, 10_000),
    TierDescriptor(3, "Standard", "Most NIST tests", 10_000, 100_000),
    TierDescriptor(4, "Full", "Complete NIST suite", 100_000, 1_000_000),
    TierDescriptor(5, "Comprehensive", "Full suite with optimal reliability", 1_000_000, 10_000_000),
)

MINIMUM_BITS = TIERS[0].min_bits


def select_tier(bit_count: int) -> TierDescriptor | None:
    """Return the highest tier whose minimum is satisfied by ``bit_count``."""

    selected = None
    for tier in TIERS:
        if bit_count >= tier.min_bits:
            selected = tier
    return selected


def next_tier(tier: TierDescriptor) -> TierDescriptor | None:
    for candidate in TIERS:
        if candidate.level == tier.level + 1:
            return candidate
    return None


def require_tier(bit_count: int) -> TierDescriptor:
    """Like :func:`select_tier` but raise when no tier applies."""

    tier = select_tier(bit_count)
    if tier is None:
        raise InsufficientDataError(
            f"NIST statistical tests require at least {MINIMUM_BITS} bits "
            f"(~{MINIMUM_BITS // 32} numbers with 32-bit encoding) for basic tests. "
            f"You provided {bit_count} bits (~{bit_count // 32} numbers). The system will use "
            "enhanced statistical tests instead, which are designed for smaller datasets.",
            bit_count=bit_count,
            required_bits=MINIMUM_BITS,
        )
    logger.info("Selected tier %d (%s) for %d bits", tier.level, tier.name, bit_count)
    return tier


__all__ = ["MINIMUM_BITS", "TIERS", "TierDescriptor", "next_tier", "require_tier", "select_tier"]
