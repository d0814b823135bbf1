from __future__ import annotations

import numpy as np
import pytest


@pytest.fixture
def random_bits():
    """Factory returning ``n`` reproducible pseudo-random bits."""

    def _make(n: int, seed: int = 12345) -> np.ndarray:
        return np.random.default_rng(seed).integers(0, 2, size=n, dtype=np.uint8)

    return _make
