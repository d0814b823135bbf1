"""Utility helpers shared by statistical randomness tests."""

from __future__ import annotations

from typing import List

import numpy as np


def to_signed(bits: np.ndarray) -> np.ndarray:
    """Map 0/1 to -1/+1."""

    return 2 * bits.astype(np.int64) - 1


def window_values(bits: np.ndarray, m: int, *, circular: bool = False) -> np.ndarray:
    """Integer value of every ``m``-bit window, first bit most significant.

    With ``circular`` the sequence wraps around so exactly ``len(bits)``
    windows are produced.
    """

    n = bits.size
    if circular:
        data = np.concatenate([bits, bits[: m - 1]]) if m > 1 else bits
        count = n
    else:
        data = bits
        count = n - m + 1
    if m <= 0 or count <= 0:
        return np.zeros(0, dtype=np.int64)
    values = np.zeros(count, dtype=np.int64)
    for offset in range(m):
        values = (values << 1) | data[offset : offset + count]
    return values


def pattern_counts(bits: np.ndarray, m: int) -> np.ndarray:
    """Occurrences of each of the ``2**m`` patterns over circular windows."""

    return np.bincount(window_values(bits, m, circular=True), minlength=1 << m)


def run_lengths(bits: np.ndarray) -> np.ndarray:
    """Lengths of the maximal runs of identical bits, in order."""

    if bits.size == 0:
        return np.zeros(0, dtype=np.int64)
    boundaries = np.flatnonzero(np.diff(bits.astype(np.int8))) + 1
    edges = np.concatenate([[0], boundaries, [bits.size]])
    return np.diff(edges)


def longest_run_of_ones(block: np.ndarray) -> int:
    padded = np.concatenate([[0], block.astype(np.int8), [0]])
    changes = np.diff(padded)
    starts = np.flatnonzero(changes == 1)
    ends = np.flatnonzero(changes == -1)
    if starts.size == 0:
        return 0
    return int((ends - starts).max())


def aperiodic_templates(m: int) -> List[int]:
    """All ``m``-bit templates that cannot overlap a shifted copy of themselves.

    Returned in ascending order. For ``m = 9`` there are 148 of them.
    """

    templates: List[int] = []
    for value in range(1 << m):
        if all(
            (value >> shift) != (value & ((1 << (m - shift)) - 1))
            for shift in range(1, m)
        ):
            templates.append(value)
    return templates


def gf2_rank(rows: List[int], width: int) -> int:
    """Rank over GF(2) of a matrix whose rows are packed into integers."""

    rows = list(rows)
    rank = 0
    for column in reversed(range(width)):
        mask = 1 << column
        pivot = next((i for i in range(rank, len(rows)) if rows[i] & mask), None)
        if pivot is None:
            continue
        rows[rank], rows[pivot] = rows[pivot], rows[rank]
        for i in range(rank + 1, len(rows)):
            if rows[i] & mask:
                rows[i] ^= rows[rank]
        rank += 1
        if rank == len(rows):
            break
    return rank


def berlekamp_massey(bits: np.ndarray) -> int:
    """Linear complexity of ``bits`` (length of the shortest generating LFSR)."""

    connection = 1
    previous = 1
    complexity = 0
    last_change = -1
    history = 0  # bit i holds s[N - i]
    for position, bit in enumerate(bits.tolist()):
        history = (history << 1) | bit
        discrepancy = (connection & history).bit_count() & 1
        if discrepancy:
            saved = connection
            connection ^= previous << (position - last_change)
            if 2 * complexity <= position:
                complexity = position + 1 - complexity
                last_change = position
                previous = saved
    return complexity


__all__ = [
    "aperiodic_templates",
    "berlekamp_massey",
    "gf2_rank",
    "longest_run_of_ones",
    "pattern_counts",
    "run_lengths",
    "to_signed",
    "window_values",
]
