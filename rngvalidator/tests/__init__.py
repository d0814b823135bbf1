"""Statistical randomness tests package."""

from .base import TestDefinition, TestOutcome
from .factory import DEFAULT_ALPHA, DEFAULT_DEFINITIONS, eligible_definitions, run_suite
from .statistical import (
    ApproximateEntropyTest,
    BlockFrequencyTest,
    CumulativeSumsTest,
    FrequencyTest,
    LinearComplexityTest,
    LongestRunTest,
    NonOverlappingTemplateTest,
    OverlappingTemplateTest,
    RandomExcursionsTest,
    RandomExcursionsVariantTest,
    RankTest,
    RunsTest,
    SerialTest,
    SpectralTest,
    UniversalTest,
)

__all__ = [
    "ApproximateEntropyTest",
    "BlockFrequencyTest",
    "CumulativeSumsTest",
    "DEFAULT_ALPHA",
    "DEFAULT_DEFINITIONS",
    "FrequencyTest",
    "LinearComplexityTest",
    "LongestRunTest",
    "NonOverlappingTemplateTest",
    "OverlappingTemplateTest",
    "RandomExcursionsTest",
    "RandomExcursionsVariantTest",
    "RankTest",
    "RunsTest",
    "SerialTest",
    "SpectralTest",
    "TestDefinition",
    "TestOutcome",
    "UniversalTest",
    "eligible_definitions",
    "run_suite",
]
