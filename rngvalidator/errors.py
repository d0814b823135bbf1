"""Custom exceptions for the random number validator."""

from __future__ import annotations


class ValidatorError(Exception):
    """Base error type for application specific failures."""

    code = "ValidatorError"


class MissingFileError(ValidatorError):
    """Raised when a required input file could not be located."""

    code = "MissingFile"


class InvalidConfigurationError(ValidatorError):
    """Raised when the configuration file is malformed or invalid."""

    code = "InvalidConfiguration"


class InvalidInputError(ValidatorError):
    """Raised when the provided input data does not meet application constraints."""

    code = "InvalidInput"


class InvalidCharacterError(InvalidInputError):
    """Raised when numeric input contains letters."""

    code = "InvalidCharacter"


class EmptyInputError(InvalidInputError):
    """Raised when the input does not contain any usable numbers or bytes."""

    code = "EmptyInput"


class NumericOverflowError(InvalidInputError):
    """Raised when a parsed number does not fit an unsigned 32-bit integer."""

    code = "NumericOverflow"


class RangeRequiredError(InvalidInputError):
    """Raised when the numbers need an explicit RNG range to be encoded."""

    code = "RangeRequired"


class RangeViolationError(InvalidInputError):
    """Raised when the explicit range is inverted or does not contain the numbers."""

    code = "RangeViolation"


class BitWidthExceededError(InvalidInputError):
    """Raised when a number is larger than the forced bit width allows."""

    code = "BitWidthExceeded"


class InvalidBitWidthError(InvalidInputError):
    """Raised when the requested bit width is not 8, 16 or 32."""

    code = "InvalidBitWidth"


class InvalidEncodingError(InvalidInputError):
    """Raised when a base64 payload cannot be decoded or decodes to nothing."""

    code = "InvalidEncoding"


class InvalidRequestError(InvalidInputError):
    """Raised when request parameters are malformed (unknown format, bad types)."""

    code = "InvalidRequest"


class InsufficientDataError(ValidatorError):
    """Raised when the bitstream is too short for any test tier.

    Callers usually react by switching to the simplified analyzer instead of
    reporting a failure.
    """

    code = "InsufficientData"

    def __init__(self, message: str, *, bit_count: int, required_bits: int) -> None:
        super().__init__(message)
        self.bit_count = bit_count
        self.required_bits = required_bits

    @property
    def missing_bits(self) -> int:
        return max(0, self.required_bits - self.bit_count)


class EncodingError(ValidatorError):
    """Raised when the base conversion bookkeeping is inconsistent."""

    code = "EncodingError"


__all__ = [
    "BitWidthExceededError",
    "EmptyInputError",
    "EncodingError",
    "InsufficientDataError",
    "InvalidBitWidthError",
    "InvalidCharacterError",
    "InvalidConfigurationError",
    "InvalidEncodingError",
    "InvalidInputError",
    "InvalidRequestError",
    "MissingFileError",
    "NumericOverflowError",
    "RangeRequiredError",
    "RangeViolationError",
    "ValidatorError",
]
