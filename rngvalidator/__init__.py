"""RNG output validator built on the NIST SP 800-22 statistical tests."""

from .analysis import QualityScore, SuiteResult
from .app import RandomnessValidator, ValidateRequest, ValidateResult, validate

__all__ = [
    "QualityScore",
    "RandomnessValidator",
    "SuiteResult",
    "ValidateRequest",
    "ValidateResult",
    "validate",
]
