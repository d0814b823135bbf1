"""Input helpers for turning raw text payloads into numbers or bytes."""

from __future__ import annotations

import base64
import binascii
import enum
import logging
import re
from dataclasses import dataclass
from pathlib import Path, PureWindowsPath
from typing import Tuple

from .errors import (
    EmptyInputError,
    InvalidCharacterError,
    InvalidEncodingError,
    InvalidRequestError,
    MissingFileError,
    NumericOverflowError,
)

logger = logging.getLogger(__name__)

UINT32_MAX = 0xFFFF_FFFF
"""Largest value accepted in ``numbers`` mode."""
UINT32_DIGITS = len(str(UINT32_MAX))

DIGIT_RUN_PATTERN = re.compile(r"[0-9]+")
WHITESPACE_PATTERN = re.compile(r"\s+")


class InputFormat(str, enum.Enum):
    """Supported payload formats."""

    NUMBERS = "numbers"
    BASE64 = "base64"

    @classmethod
    def parse(cls, value: "InputFormat | str | None") -> "InputFormat":
        if value is None:
            return cls.NUMBERS
        if isinstance(value, cls):
            return value
        normalised = str(value).strip().lower()
        for member in cls:
            if member.value == normalised:
                return member
        raise InvalidRequestError(
            f"Unknown input_format '{value}'. Expected 'numbers' or 'base64'."
        )


@dataclass(frozen=True)
class NumericInput:
    """Ordered, non-empty sequence of unsigned 32-bit integers."""

    values: Tuple[int, ...]

    @property
    def count(self) -> int:
        return len(self.values)

    @property
    def minimum(self) -> int:
        return min(self.values)

    @property
    def maximum(self) -> int:
        return max(self.values)


def parse_numbers(text: str) -> NumericInput:
    """Extract every run of ASCII digits from ``text``.

    Any non-digit character acts as a delimiter, so ``"1, 2;3\\n4"`` yields
    four numbers. Letters are rejected outright rather than silently skipped.
    """

    if any(char.isalpha() for char in text):
        raise InvalidCharacterError(
            "Input contains letters - only numbers and delimiters are allowed"
        )

    runs = DIGIT_RUN_PATTERN.findall(text)
    if not runs:
        raise EmptyInputError("No numbers provided")

    values = []
    for run in runs:
        digits = run.lstrip("0") or "0"
        if len(digits) > UINT32_DIGITS or int(digits) > UINT32_MAX:
            shown = digits if len(digits) <= 20 else f"{digits[:20]}... ({len(digits)} digits)"
            raise NumericOverflowError(
                f"Invalid number format: {shown} exceeds the maximum unsigned 32-bit value of {UINT32_MAX}"
            )
        values.append(int(digits))
    return NumericInput(values=tuple(values))


def decode_base64(text: str) -> bytes:
    """Decode a base64 payload, tolerating whitespace and missing padding."""

    cleaned = WHITESPACE_PATTERN.sub("", text)
    padding = (4 - len(cleaned) % 4) % 4
    if padding:
        logger.debug("Added %d padding character(s) to base64 input", padding)
        cleaned += "=" * padding
    try:
        data = base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidEncodingError(f"Invalid base64 input: {exc}") from exc
    if not data:
        raise InvalidEncodingError("Base64 decoded to empty data")
    logger.debug("Decoded %d bytes from base64", len(data))
    return data


def read_input_file(path: Path | str) -> str:
    """Read the raw payload stored in ``path`` using UTF-8 encoding."""

    candidate = _normalise_path(path)
    if not candidate.exists():
        raise MissingFileError(f"Input file not found: {candidate}")
    try:
        content = candidate.read_text(encoding="utf-8")
    except OSError as exc:  # pragma: no cover - filesystem guard
        raise MissingFileError(f"Could not read input file: {candidate}") from exc
    if not content.strip():
        raise EmptyInputError(f"Input file '{candidate}' does not contain any data.")
    return content


def _normalise_path(path: Path | str) -> Path:
    if isinstance(path, str) and re.match(r"^[A-Za-z]:\\", path):
        return Path(PureWindowsPath(path))
    return Path(path).expanduser().resolve()


__all__ = [
    "InputFormat",
    "NumericInput",
    "UINT32_MAX",
    "decode_base64",
    "parse_numbers",
    "read_input_file",
]
