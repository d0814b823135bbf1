"""Configuration parsing utilities for the randomness validator."""

from __future__ import annotations

import configparser
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from .analysis import (
    DEFAULT_PASS_RATE_WEIGHT,
    DEFAULT_SIGNIFICANCE_LEVEL,
    DEFAULT_VALIDITY_THRESHOLD,
)
from .debug import DEFAULT_DEBUG_DIRECTORY
from .errors import InvalidConfigurationError, MissingFileError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ValidationSection:
    """Thresholds used when judging test outcomes."""

    significance_level: float = DEFAULT_SIGNIFICANCE_LEVEL
    validity_threshold: float = DEFAULT_VALIDITY_THRESHOLD
    pass_rate_weight: float = DEFAULT_PASS_RATE_WEIGHT


@dataclass(frozen=True)
class DebugSection:
    """Options controlling the bitstream dump."""

    write_bitstream: bool = False
    directory: Path = Path(DEFAULT_DEBUG_DIRECTORY)


@dataclass(frozen=True)
class OutputSection:
    report_path: Path | None = None


@dataclass(frozen=True)
class LoggingSection:
    level: str = "INFO"

    @property
    def numeric_level(self) -> int:
        return getattr(logging, self.level)


@dataclass(frozen=True)
class ValidatorConfig:
    """Aggregate configuration container returned by :func:`load_config`."""

    validation: ValidationSection = field(default_factory=ValidationSection)
    debug: DebugSection = field(default_factory=DebugSection)
    output: OutputSection = field(default_factory=OutputSection)
    logging: LoggingSection = field(default_factory=LoggingSection)
    source: Path | None = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)


DEFAULT_CONFIG = ValidatorConfig()


def load_config(path: Path | str) -> ValidatorConfig:
    """Load and validate an INI configuration file.

    Every section and option is optional; anything left out keeps its
    default. Relative paths are resolved against the file's directory.
    """

    path = Path(path)
    parser = configparser.ConfigParser()
    try:
        with path.open("r", encoding="utf-8") as config_file:
            parser.read_file(config_file)
    except FileNotFoundError as exc:
        raise MissingFileError(f"Configuration file not found: {path}") from exc
    except OSError as exc:  # pragma: no cover - filesystem guard
        raise MissingFileError(f"Could not read configuration file: {path}") from exc
    except configparser.Error as exc:
        raise InvalidConfigurationError(f"Configuration file is malformed: {exc}") from exc

    base_dir = path.resolve().parent
    warnings = [
        f"Unknown section [{name}] ignored."
        for name in parser.sections()
        if name not in {"validation", "debug", "output", "logging"}
    ]
    return ValidatorConfig(
        validation=_parse_validation(parser),
        debug=_parse_debug(parser, base_dir),
        output=_parse_output(parser, base_dir),
        logging=_parse_logging(parser),
        source=path.resolve(),
        warnings=tuple(warnings),
    )


def _get_float(
    parser: configparser.ConfigParser,
    section: str,
    option: str,
    default: float,
    *,
    lower: float,
    upper: float,
    inclusive: bool = True,
) -> float:
    if not parser.has_option(section, option):
        return default
    raw = parser.get(section, option).strip()
    try:
        value = float(raw)
    except ValueError as exc:
        raise InvalidConfigurationError(
            f"Option '{option}' in [{section}] must be numeric."
        ) from exc
    in_range = lower <= value <= upper if inclusive else lower < value < upper
    if not in_range:
        bounds = "between" if inclusive else "strictly between"
        raise InvalidConfigurationError(
            f"Option '{option}' in [{section}] must be {bounds} {lower:g} and {upper:g}."
        )
    return value


def _parse_validation(parser: configparser.ConfigParser) -> ValidationSection:
    return ValidationSection(
        significance_level=_get_float(
            parser,
            "validation",
            "significance_level",
            DEFAULT_SIGNIFICANCE_LEVEL,
            lower=0.0,
            upper=1.0,
            inclusive=False,
        ),
        validity_threshold=_get_float(
            parser, "validation", "validity_threshold", DEFAULT_VALIDITY_THRESHOLD, lower=0.0, upper=1.0
        ),
        pass_rate_weight=_get_float(
            parser, "validation", "pass_rate_weight", DEFAULT_PASS_RATE_WEIGHT, lower=0.0, upper=1.0
        ),
    )


def _parse_debug(parser: configparser.ConfigParser, base_dir: Path) -> DebugSection:
    if not parser.has_section("debug"):
        return DebugSection(directory=(base_dir / DEFAULT_DEBUG_DIRECTORY).resolve())
    section = parser["debug"]
    write_bitstream = False
    if "write_bitstream" in section:
        try:
            write_bitstream = section.getboolean("write_bitstream")
        except ValueError as exc:
            raise InvalidConfigurationError(
                "Option 'write_bitstream' in [debug] must be a boolean value."
            ) from exc
    raw_directory = section.get("directory", DEFAULT_DEBUG_DIRECTORY).strip() or DEFAULT_DEBUG_DIRECTORY
    return DebugSection(
        write_bitstream=write_bitstream,
        directory=_resolve_path(raw_directory, base_dir),
    )


def _parse_output(parser: configparser.ConfigParser, base_dir: Path) -> OutputSection:
    if not parser.has_section("output"):
        return OutputSection()
    raw_report = parser["output"].get("report_path", "").strip()
    if not raw_report:
        return OutputSection()
    return OutputSection(report_path=_resolve_path(raw_report, base_dir))


def _parse_logging(parser: configparser.ConfigParser) -> LoggingSection:
    if not parser.has_option("logging", "level"):
        return LoggingSection()
    level = parser.get("logging", "level").strip().upper()
    if level not in LOG_LEVELS:
        allowed = ", ".join(LOG_LEVELS)
        raise InvalidConfigurationError(
            f"Option 'level' in [logging] must be one of: {allowed}."
        )
    return LoggingSection(level=level)


def _resolve_path(raw: str, base_dir: Path) -> Path:
    candidate = Path(raw).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return candidate.resolve()


__all__ = [
    "DEFAULT_CONFIG",
    "DebugSection",
    "LOG_LEVELS",
    "LoggingSection",
    "OutputSection",
    "ValidationSection",
    "ValidatorConfig",
    "load_config",
]
