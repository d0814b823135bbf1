"""Application orchestration: decode, encode, test and score one request."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

from .analysis import SuiteResult, is_valid, run_tiered_suite
from .config import DEFAULT_CONFIG, ValidatorConfig
from .debug import write_bits_to_debug_file
from .encoding import EncodedInput, encode_bytes, encode_numbers
from .errors import InsufficientDataError, InvalidRequestError, ValidatorError
from .fallback import FallbackReport, run_fallback_analysis
from .io import InputFormat, decode_base64, parse_numbers
from .reporting import build_fallback_output, build_suite_output
from .tests.base import TestOutcome
from .tiers import TierDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidateRequest:
    """Parameters of one validation call."""

    numbers: str
    input_format: InputFormat | str = InputFormat.NUMBERS
    range_min: int | None = None
    range_max: int | None = None
    bit_width: int | None = None
    debug_log: bool = False

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "ValidateRequest":
        """Build a request from a decoded JSON-like mapping."""

        if not isinstance(payload, Mapping):
            raise InvalidRequestError("Request must be an object.")
        numbers = payload.get("numbers")
        if not isinstance(numbers, str):
            raise InvalidRequestError("Field 'numbers' must be a string.")
        debug_log = payload.get("debug_log", False)
        if not isinstance(debug_log, bool):
            raise InvalidRequestError("Field 'debug_log' must be a boolean.")
        return cls(
            numbers=numbers,
            input_format=InputFormat.parse(payload.get("input_format")),
            range_min=_optional_int(payload, "range_min"),
            range_max=_optional_int(payload, "range_max"),
            bit_width=_optional_int(payload, "bit_width"),
            debug_log=debug_log,
        )


def _optional_int(payload: Mapping[str, Any], key: str) -> int | None:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidRequestError(f"Field '{key}' must be a non-negative integer.")
    return value


@dataclass(frozen=True)
class ValidateResult:
    """Caller-facing outcome of a validation."""

    valid: bool
    quality_score: float
    message: str
    tests: Tuple[TestOutcome, ...] = ()
    bit_count: int = 0
    tests_passed: int = 0
    total_tests: int = 0
    raw_output: str | None = None
    tier: TierDescriptor | None = None
    fallback_used: bool = False
    error_code: str | None = None
    debug_file: Path | None = None
    started_at: datetime | None = None
    duration: timedelta | None = field(default=None, compare=False)

    @classmethod
    def rejected(cls, error: ValidatorError, **kwargs: Any) -> "ValidateResult":
        return cls(valid=False, quality_score=0.0, message=str(error), error_code=error.code, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable representation."""

        return {
            "valid": self.valid,
            "quality_score": self.quality_score,
            "message": self.message,
            "bit_count": self.bit_count,
            "tests_passed": self.tests_passed,
            "total_tests": self.total_tests,
            "tier": None
            if self.tier is None
            else {"level": self.tier.level, "name": self.tier.name, "description": self.tier.description},
            "fallback_used": self.fallback_used,
            "error_code": self.error_code,
            "debug_file": None if self.debug_file is None else str(self.debug_file),
            "tests": [
                {
                    "name": test.name,
                    "passed": test.passed,
                    "p_value": test.p_value,
                    "p_values": list(test.p_values),
                    "description": test.description,
                }
                for test in self.tests
            ],
            "raw_output": self.raw_output,
        }


class RandomnessValidator:
    """High level service wiring decoding, encoding, testing and scoring."""

    def __init__(self, config: ValidatorConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    @property
    def config(self) -> ValidatorConfig:
        return self._config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def validate(self, request: ValidateRequest) -> ValidateResult:
        """Validate ``request``; input problems are reported, never raised."""

        started_at = datetime.now(timezone.utc)
        logger.debug(
            "Starting validation: input_length=%d, format=%s, range=%s-%s, bit_width=%s, debug_log=%s",
            len(request.numbers),
            request.input_format,
            request.range_min,
            request.range_max,
            request.bit_width,
            request.debug_log,
        )
        try:
            result = self._validate(request)
        except ValidatorError as exc:
            logger.warning("Validation rejected input: %s", exc)
            result = ValidateResult.rejected(exc)
        return _with_timing(result, started_at)

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------
    def _validate(self, request: ValidateRequest) -> ValidateResult:
        input_format = InputFormat.parse(request.input_format)
        encoded = self._encode(request, input_format)
        debug_file = self._write_debug(encoded, request.debug_log)

        validation = self._config.validation
        try:
            suite = run_tiered_suite(
                encoded.bits,
                alpha=validation.significance_level,
                pass_rate_weight=validation.pass_rate_weight,
            )
        except InsufficientDataError as exc:
            logger.warning("Switching to enhanced statistical analysis: %s", exc)
            report = run_fallback_analysis(encoded.bits)
            return self._fallback_result(report, exc, encoded, input_format, debug_file)
        return self._suite_result(suite, debug_file)

    def _encode(self, request: ValidateRequest, input_format: InputFormat) -> EncodedInput:
        if input_format is InputFormat.BASE64:
            if any(v is not None for v in (request.range_min, request.range_max, request.bit_width)):
                logger.warning("range_min, range_max, and bit_width are ignored for base64 input")
            return encode_bytes(decode_base64(request.numbers))
        numbers = parse_numbers(request.numbers)
        return encode_numbers(
            numbers,
            range_min=request.range_min,
            range_max=request.range_max,
            bit_width=request.bit_width,
        )

    def _write_debug(self, encoded: EncodedInput, requested: bool) -> Path | None:
        debug = self._config.debug
        if not (requested or debug.write_bitstream):
            return None
        try:
            return write_bits_to_debug_file(encoded.bits, debug.directory)
        except OSError as exc:
            logger.warning("Failed to write debug file: %s", exc)
            return None

    def _suite_result(self, suite: SuiteResult, debug_file: Path | None) -> ValidateResult:
        validation = self._config.validation
        score = suite.score
        valid = is_valid(score.success_rate, validation.validity_threshold)
        logger.info(
            "Validation complete: valid=%s, quality_score=%.4f, bits=%d, tests_passed=%d/%d",
            valid,
            score.quality_score,
            suite.bit_count,
            score.tests_passed,
            score.total_tests,
        )
        return ValidateResult(
            valid=valid,
            quality_score=score.quality_score,
            message=(
                f"Analyzed {suite.bit_count} bits using {score.total_tests} NIST tests "
                f"({score.tests_passed}/{score.total_tests} passed)"
            ),
            tests=suite.outcomes,
            bit_count=suite.bit_count,
            tests_passed=score.tests_passed,
            total_tests=score.total_tests,
            raw_output=build_suite_output(suite, alpha=validation.significance_level),
            tier=suite.tier,
            debug_file=debug_file,
        )

    def _fallback_result(
        self,
        report: FallbackReport,
        shortfall: InsufficientDataError,
        encoded: EncodedInput,
        input_format: InputFormat,
        debug_file: Path | None,
    ) -> ValidateResult:
        quality_score = report.quality_score
        missing = shortfall.missing_bits
        message = (
            f"Insufficient data for NIST tests: {shortfall.bit_count} bits provided, "
            f"{shortfall.required_bits} required ({missing} more bits"
        )
        if input_format is InputFormat.NUMBERS and encoded.bits_per_value > 0:
            more_numbers = math.ceil(missing / encoded.bits_per_value)
            message += f", ~{more_numbers} more numbers"
        message += (
            f"). Ran {report.total_tests} enhanced statistical tests "
            f"({report.tests_passed}/{report.total_tests} passed)"
        )
        return ValidateResult(
            valid=quality_score >= self._config.validation.validity_threshold,
            quality_score=quality_score,
            message=message,
            tests=tuple(report.tests),
            bit_count=report.bit_count,
            tests_passed=report.tests_passed,
            total_tests=report.total_tests,
            raw_output=build_fallback_output(report),
            fallback_used=True,
            debug_file=debug_file,
        )


def _with_timing(result: ValidateResult, started_at: datetime) -> ValidateResult:
    return replace(result, started_at=started_at, duration=datetime.now(timezone.utc) - started_at)


def validate(
    numbers: str,
    *,
    input_format: InputFormat | str = InputFormat.NUMBERS,
    range_min: int | None = None,
    range_max: int | None = None,
    bit_width: int | None = None,
    debug_log: bool = False,
    config: ValidatorConfig | None = None,
) -> ValidateResult:
    """Validate ``numbers`` with a one-off :class:`RandomnessValidator`."""

    request = ValidateRequest(
        numbers=numbers,
        input_format=input_format,
        range_min=range_min,
        range_max=range_max,
        bit_width=bit_width,
        debug_log=debug_log,
    )
    return RandomnessValidator(config).validate(request)


__all__ = ["RandomnessValidator", "ValidateRequest", "ValidateResult", "validate"]
