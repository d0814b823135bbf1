"""Command line entry point for the RNG validator."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .app import RandomnessValidator, ValidateRequest
from .config import DEFAULT_CONFIG, LOG_LEVELS, LoggingSection, ValidatorConfig, load_config
from .errors import InvalidConfigurationError, MissingFileError, ValidatorError
from .io import InputFormat, read_input_file
from .reporting import print_console_summary, write_markdown_report

EXIT_SUCCESS = 0
EXIT_MISSING_FILE = 2
EXIT_INVALID_CONFIG = 3
EXIT_INPUT_REJECTED = 4
EXIT_UNEXPECTED_ERROR = 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rngvalidator",
        description="Assess the statistical randomness of RNG output with NIST SP 800-22 tests.",
    )
    parser.add_argument(
        "--input",
        "-i",
        type=Path,
        required=True,
        help="Path to a text file containing numbers or a base64 payload.",
    )
    parser.add_argument(
        "--format",
        "-f",
        choices=[member.value for member in InputFormat],
        default=InputFormat.NUMBERS.value,
        help="Payload format of the input file (default: numbers).",
    )
    parser.add_argument("--range-min", type=int, help="Smallest value the RNG can produce.")
    parser.add_argument("--range-max", type=int, help="Largest value the RNG can produce.")
    parser.add_argument(
        "--bit-width",
        type=int,
        help="Force fixed-width encoding with 8, 16 or 32 bits per number.",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Optional INI configuration file.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON instead of a summary.",
    )
    parser.add_argument(
        "--report",
        "-r",
        type=Path,
        help="Optional path where a markdown report will be written.",
    )
    parser.add_argument(
        "--debug-bits",
        action="store_true",
        help="Write the encoded bitstream to the debug directory.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print detailed per-test information to the console output.",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Logging level (overrides the configuration file).",
    )
    return parser


def _resolve_log_level(override: str | None, config: ValidatorConfig) -> int:
    if override is not None:
        return LoggingSection(level=override).numeric_level
    return config.logging.numeric_level


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_config(args.config) if args.config is not None else DEFAULT_CONFIG
        for warning in config.warnings:
            print(f"Warning: {warning}", file=sys.stderr)
        logging.basicConfig(
            level=_resolve_log_level(args.log_level, config),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )
        payload = read_input_file(args.input)
        request = ValidateRequest(
            numbers=payload,
            input_format=args.format,
            range_min=args.range_min,
            range_max=args.range_max,
            bit_width=args.bit_width,
            debug_log=args.debug_bits,
        )
        result = RandomnessValidator(config).validate(request)

        if args.json:
            print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        else:
            print_console_summary(result, verbose=args.verbose)

        report_path = args.report or config.output.report_path
        if report_path is not None:
            written = write_markdown_report(result, report_path, source=args.input)
            if not args.json:
                print(f"Report written to: {written}")
    except MissingFileError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_MISSING_FILE
    except InvalidConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_INVALID_CONFIG
    except ValidatorError as exc:
        print(f"Input rejected: {exc}", file=sys.stderr)
        return EXIT_INPUT_REJECTED
    except Exception as exc:  # pragma: no cover - last-resort exit code
        print(f"Unexpected error: {exc}", file=sys.stderr)
        return EXIT_UNEXPECTED_ERROR
    if result.error_code is not None:
        return EXIT_INPUT_REJECTED
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
