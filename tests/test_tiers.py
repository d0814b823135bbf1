from __future__ import annotations

import pytest

from rngvalidator.errors import InsufficientDataError
from rngvalidator.tiers import TIERS, next_tier, require_tier, select_tier


@pytest.mark.parametrize(
    "bit_count, level",
    [
        (100, 1),
        (999, 1),
        (1_000, 2),
        (9_999, 2),
        (10_000, 3),
        (99_999, 3),
        (100_000, 4),
        (999_999, 4),
        (1_000_000, 5),
        (50_000_000, 5),
    ],
)
def test_select_tier_boundaries(bit_count: int, level: int) -> None:
    tier = select_tier(bit_count)

    assert tier is not None
    assert tier.level == level


def test_select_tier_below_minimum() -> None:
    assert select_tier(99) is None
    assert select_tier(0) is None


def test_tier_table_is_monotonic() -> None:
    assert [tier.level for tier in TIERS] == [1, 2, 3, 4, 5]
    assert all(a.min_bits < b.min_bits for a, b in zip(TIERS, TIERS[1:]))
    assert all(tier.recommended_bits == 10 * tier.min_bits for tier in TIERS)


def test_next_tier() -> None:
    assert next_tier(TIERS[0]) is TIERS[1]
    assert next_tier(TIERS[-1]) is None


def test_require_tier_reports_shortfall() -> None:
    with pytest.raises(InsufficientDataError) as excinfo:
        require_tier(4)

    error = excinfo.value
    assert error.bit_count == 4
    assert error.required_bits == 100
    assert error.missing_bits == 96
    assert "at least 100 bits" in str(error)
    assert "You provided 4 bits" in str(error)
