"""Performance helpers for benchmarking and profiling the validation pipeline."""

from __future__ import annotations

import cProfile
import io
import pstats
import statistics
import timeit
from contextlib import contextmanager
from typing import Callable, Iterator, Mapping, Sequence

from .analysis import score_outcomes
from .app import RandomnessValidator, ValidateRequest
from .encoding import encode_numbers
from .io import parse_numbers
from .tests.base import TestOutcome


def _summarise(runs: Sequence[float]) -> Mapping[str, float]:
    return {
        "min": min(runs),
        "max": max(runs),
        "mean": statistics.fmean(runs),
    }


def benchmark_encoding(
    text: str,
    *,
    range_min: int | None = None,
    range_max: int | None = None,
    bit_width: int | None = None,
    repeat: int = 5,
) -> Mapping[str, float]:
    """Benchmark parsing plus :func:`encode_numbers` for ``text``."""

    def _encode() -> None:
        encode_numbers(
            parse_numbers(text), range_min=range_min, range_max=range_max, bit_width=bit_width
        )

    timer = timeit.Timer(_encode)
    return _summarise(timer.repeat(repeat=repeat, number=1))


def benchmark_scoring(outcomes: Sequence[TestOutcome], *, repeat: int = 5) -> Mapping[str, float]:
    """Benchmark :func:`score_outcomes` on ``outcomes``."""

    cached = tuple(outcomes)
    timer = timeit.Timer(lambda: score_outcomes(cached))
    return _summarise(timer.repeat(repeat=repeat, number=1))


def profile_validation(
    request: ValidateRequest,
    *,
    validator: RandomnessValidator | None = None,
    repeat: int = 1,
    limit: int = 25,
) -> str:
    """Profile :meth:`RandomnessValidator.validate` using :mod:`cProfile`."""

    target = validator or RandomnessValidator()
    profiler = cProfile.Profile()
    for _ in range(repeat):
        profiler.runcall(target.validate, request)
    return _format_stats(profiler, limit)


@contextmanager
def capture_profile(
    validator: RandomnessValidator | None = None,
) -> Iterator[tuple[RandomnessValidator, Callable[[int], str]]]:
    """Context manager capturing profiling data for manual inspection.

    The yielded tuple contains the :class:`RandomnessValidator` to use for the
    profiled operations and a callable that returns a formatted profile
    summary when invoked.
    """

    profiler = cProfile.Profile()
    target = validator or RandomnessValidator()
    profiler.enable()

    def exporter(limit: int = 25) -> str:
        profiler.disable()
        return _format_stats(profiler, limit)

    try:
        yield target, exporter
    finally:
        profiler.disable()


def _format_stats(profiler: cProfile.Profile, limit: int) -> str:
    stream = io.StringIO()
    stats = pstats.Stats(profiler, stream=stream)
    stats.strip_dirs().sort_stats("cumulative").print_stats(limit)
    return stream.getvalue()


__all__ = [
    "benchmark_encoding",
    "benchmark_scoring",
    "capture_profile",
    "profile_validation",
]
