"""Conversion of decoded numbers and bytes into a flat bitstream.

Two strategies are available:

``fixed-width``
    Every number is written with the same number of bits (8, 16 or 32),
    most significant bit first. Only sound when the RNG output starts at zero
    and spans the whole width, otherwise the constant leading bits bias the
    statistical tests.

``base-conversion``
    The sequence is read as the digits of one big integer in base
    ``range_max - range_min + 1`` and that integer is written out in binary.
    The output length only depends on the count and the range size, so every
    sequence of the same shape yields the same number of bits and no bit
    position is systematically zero.

The encoder never guesses a range: numbers that do not start at zero require
an explicit ``range_min``/``range_max`` (or a forced ``bit_width``).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Literal, Sequence

import numpy as np

from .errors import (
    BitWidthExceededError,
    EncodingError,
    InvalidBitWidthError,
    RangeRequiredError,
    RangeViolationError,
)
from .io import NumericInput

logger = logging.getLogger(__name__)

EncodingStrategy = Literal["fixed-width", "base-conversion", "bytes"]

STANDARD_BIT_WIDTHS = (8, 16, 32)
"""Bit widths accepted by the fixed-width strategy."""


@dataclass(frozen=True)
class EncodingRange:
    """Inclusive output range of the RNG under test."""

    minimum: int
    maximum: int

    def __post_init__(self) -> None:
        if self.minimum > self.maximum:
            raise RangeViolationError(
                f"Invalid range: min ({self.minimum}) > max ({self.maximum})"
            )

    @property
    def size(self) -> int:
        return self.maximum - self.minimum + 1

    def contains(self, lowest: int, highest: int) -> bool:
        return self.minimum <= lowest and highest <= self.maximum


@dataclass(frozen=True)
class EncodedInput:
    """Bitstream together with how it was produced."""

    bits: np.ndarray
    strategy: EncodingStrategy
    value_count: int
    bits_per_value: float

    @property
    def bit_count(self) -> int:
        return int(self.bits.size)


def encode_numbers(
    numbers: NumericInput,
    *,
    range_min: int | None = None,
    range_max: int | None = None,
    bit_width: int | None = None,
) -> EncodedInput:
    """Encode ``numbers`` into bits using the strategy the parameters call for."""

    if bit_width is not None:
        width = _validate_bit_width(bit_width)
        max_value = (1 << width) - 1
        if numbers.maximum > max_value:
            raise BitWidthExceededError(
                f"Number {numbers.maximum} exceeds {width}-bit maximum value of {max_value}. "
                "Please select a larger bit-width or use custom range."
            )
        # A nonzero minimum is accepted here: a short sample may simply not
        # contain the RNG's floor, and any resulting bias shows up in the tests.
        logger.info("Using enforced bit-width: %d bits (range 0-%d)", width, numbers.maximum)
        return _fixed_width(numbers, width)

    if range_min is not None and range_max is not None:
        encoding_range = EncodingRange(range_min, range_max)
        if not encoding_range.contains(numbers.minimum, numbers.maximum):
            raise RangeViolationError(
                f"Numbers ({numbers.minimum}-{numbers.maximum}) outside specified range "
                f"({encoding_range.minimum}-{encoding_range.maximum})"
            )
        logger.info(
            "Using base conversion for custom range %d-%d (actual: %d-%d)",
            encoding_range.minimum,
            encoding_range.maximum,
            numbers.minimum,
            numbers.maximum,
        )
        bits = base_conversion_bits(numbers.values, encoding_range)
        return EncodedInput(
            bits=bits,
            strategy="base-conversion",
            value_count=numbers.count,
            bits_per_value=math.log2(encoding_range.size),
        )

    if numbers.minimum == 0:
        width = next(w for w in STANDARD_BIT_WIDTHS if numbers.maximum < (1 << w))
        logger.info("Using fixed-width: %d bits (range 0-%d)", width, numbers.maximum)
        return _fixed_width(numbers, width)

    raise RangeRequiredError(
        f"Numbers range from {numbers.minimum} to {numbers.maximum}, which doesn't fit standard "
        "bit widths (0-255, 0-65535, or 0-4294967295). Please specify the intended range of your "
        "random number generator using range_min and range_max fields. For example, if you're "
        "generating numbers 1-100, set range_min=1 and range_max=100."
    )


def encode_bytes(data: bytes) -> EncodedInput:
    """Expand raw bytes into bits, most significant bit first."""

    bits = np.unpackbits(np.frombuffer(data, dtype=np.uint8))
    logger.info("Decoded %d bytes -> %d bits", len(data), bits.size)
    return EncodedInput(bits=bits, strategy="bytes", value_count=len(data), bits_per_value=8.0)


def fixed_width_bits(values: Sequence[int], width: int) -> np.ndarray:
    """Return ``width`` bits per value, most significant bit first."""

    width = _validate_bit_width(width)
    words = np.asarray(values, dtype=">u4")
    all_bits = np.unpackbits(words.view(np.uint8)).reshape(-1, 32)
    return np.ascontiguousarray(all_bits[:, 32 - width:]).ravel()


def base_conversion_bits(values: Sequence[int], encoding_range: EncodingRange) -> np.ndarray:
    """Encode ``values`` as one big integer in base ``encoding_range.size``.

    The result has exactly ``ceil(len(values) * log2(base))`` bits. The length
    is derived with integer arithmetic so no float rounding can add or drop a
    bit.
    """

    base = encoding_range.size
    big = 0
    for value in values:
        big = big * base + (value - encoding_range.minimum)

    # Smallest t with 2**t >= base**count, i.e. ceil(count * log2(base)).
    expected_bits = (base ** len(values) - 1).bit_length()

    byte_length = max(1, (big.bit_length() + 7) // 8)
    natural = np.unpackbits(np.frombuffer(big.to_bytes(byte_length, "big"), dtype=np.uint8))
    current_bits = natural.size

    if current_bits > expected_bits:
        to_trim = current_bits - expected_bits
        leading_zeros = _count_leading_zeros(natural)
        if leading_zeros < to_trim:
            raise EncodingError(
                f"Value too large: need to trim {to_trim} bits but only {leading_zeros} leading zeros available"
            )
        bits = natural[to_trim:]
    elif current_bits < expected_bits:
        bits = np.concatenate([np.zeros(expected_bits - current_bits, dtype=np.uint8), natural])
    else:
        bits = natural

    logger.info(
        "Base conversion: %d numbers -> %d bits (%.2f bits/number)",
        len(values),
        bits.size,
        math.log2(base) if base > 1 else 0.0,
    )
    return np.ascontiguousarray(bits, dtype=np.uint8)


def pack_bits(bits: Iterable[int]) -> bytes:
    """Pack 0/1 values into bytes, right-padding the last byte with zeros."""

    array = np.fromiter((int(bit) & 1 for bit in bits), dtype=np.uint8)
    return np.packbits(array).tobytes()


def _fixed_width(numbers: NumericInput, width: int) -> EncodedInput:
    bits = fixed_width_bits(numbers.values, width)
    logger.info(
        "Converted %d numbers to %d bits (%d bits per number)", numbers.count, bits.size, width
    )
    return EncodedInput(
        bits=bits,
        strategy="fixed-width",
        value_count=numbers.count,
        bits_per_value=float(width),
    )


def _validate_bit_width(bit_width: int) -> int:
    if bit_width not in STANDARD_BIT_WIDTHS:
        raise InvalidBitWidthError(f"Invalid bit_width: {bit_width}. Must be 8, 16, or 32.")
    return int(bit_width)


def _count_leading_zeros(bits: np.ndarray) -> int:
    ones = np.flatnonzero(bits)
    return int(ones[0]) if ones.size else int(bits.size)


__all__ = [
    "EncodedInput",
    "EncodingRange",
    "STANDARD_BIT_WIDTHS",
    "base_conversion_bits",
    "encode_bytes",
    "encode_numbers",
    "fixed_width_bits",
    "pack_bits",
]
