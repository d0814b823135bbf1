"""Reporting utilities for diagnostic text, console and markdown output."""

from __future__ import annotations

import sys
import textwrap
from dataclasses import dataclass
from datetime import timezone
from pathlib import Path
from string import Template
from typing import TYPE_CHECKING, Sequence, TextIO

from .tiers import next_tier

if TYPE_CHECKING:
    from datetime import timedelta
    from .analysis import SuiteResult
    from .app import ValidateResult
    from .fallback import FallbackReport
    from .tests.base import TestOutcome

PASS_MARK = "✓"
FAIL_MARK = "✗"
BITS_PER_NUMBER_HINT = 32


@dataclass(frozen=True)
class ReportTemplate:
    """Container for the markdown report template."""

    template: Template = Template(
        textwrap.dedent(
            """
            # RNG Validation Report

            ## Summary
            ${summary}

            ## Input
            ${input_overview}

            ## Test Results
            ${test_table}

            ## Diagnostic Output
            ```
            ${raw_output}
            ```

            _Generated on ${timestamp} (duration: ${duration})._
            """
        ).strip()
    )


DEFAULT_TEMPLATE = ReportTemplate()


def build_suite_output(suite: "SuiteResult", *, alpha: float = 0.01) -> str:
    """Render the NIST-style diagnostic text for a tiered suite run."""

    tier = suite.tier
    score = suite.score
    lines = [
        "NIST Statistical Test Suite - Results",
        "======================================",
        "",
        f"Dataset: {suite.bit_count} bits",
        f"Test Tier: Level {tier.level} - {tier.name} ({tier.description})",
        "",
        f"Overall: {score.tests_passed}/{score.total_tests} tests passed (binary pass/fail)",
        f"Quality Score: {score.success_rate:.1f}% (weighted by p-values)",
        "",
        "Individual Test Results:",
        "------------------------",
    ]
    for outcome in suite.outcomes:
        mark = PASS_MARK if outcome.passed else FAIL_MARK
        lines.append(f"  {mark} {outcome.name}: p-value = {outcome.p_value or 0.0:.6f}")
    lines.extend(
        [
            "",
            "",
            f"All tests use significance level α = {alpha:g}",
            f"Tests pass if p-value ≥ {alpha:g}",
            "",
            "Test Coverage:",
            "-------------",
        ]
    )
    upcoming = next_tier(tier)
    if upcoming is None:
        lines.append(
            f"Maximum tier reached (Tier {tier.level}). "
            "All NIST tests available with optimal reliability."
        )
    else:
        lines.extend(
            [
                f"Current: Tier {tier.level} ({tier.description}) - {score.total_tests} tests run",
                f"Recommended: {tier.recommended_bits} bits "
                f"(~{tier.recommended_bits // BITS_PER_NUMBER_HINT} numbers) for optimal reliability",
                f"Next Tier: Level {upcoming.level} ({upcoming.name}) requires {upcoming.min_bits} bits "
                f"(~{upcoming.min_bits // BITS_PER_NUMBER_HINT} numbers)",
            ]
        )
    return "\n".join(lines) + "\n"


def build_fallback_output(report: "FallbackReport") -> str:
    """Render the text summary of the small-sample heuristics."""

    lines = [
        "Enhanced Statistical Analysis (Small Dataset)",
        "===============================================",
        f"Input Size: {report.bit_count} bits",
        f"Tests Run: {report.total_tests}",
        f"Tests Passed: {report.tests_passed}/{report.total_tests} ({report.pass_rate:.1f}%)",
        "",
        "Individual Test Results:",
        "-----------------------",
    ]
    for test in report.tests:
        status = f"PASS {PASS_MARK}" if test.passed else f"FAIL {FAIL_MARK}"
        value = f"p={test.p_value:.4f}" if test.p_value is not None else f"stat={test.statistic:.4f}"
        lines.append(f"{test.name:30} {status} ({value})")
        lines.append(f"  {test.description}")
        lines.append("")
    lines.extend(["", "Interpretation:", "---------------"])
    if report.pass_rate >= 80.0:
        lines.append(f"{PASS_MARK} GOOD: The sequence shows good randomness properties.")
    elif report.pass_rate >= 50.0:
        lines.append("⚠ MODERATE: The sequence shows some randomness but has weaknesses.")
    else:
        lines.append(f"{FAIL_MARK} POOR: The sequence shows poor randomness properties.")
    lines.extend(
        [
            "",
            "Note: These are simplified statistical tests suitable for small datasets.",
            "For comprehensive analysis, provide 313+ numbers (10,000+ bits) to enable full NIST testing.",
        ]
    )
    return "\n".join(lines) + "\n"


def print_console_summary(
    result: "ValidateResult", *, verbose: bool = False, stream: TextIO | None = None
) -> None:
    """Print a short summary of the validation to ``stream``."""

    output = stream if stream is not None else sys.stdout
    if result.error_code is not None:
        print(f"Result: REJECTED ({result.error_code}) | {result.message}", file=output)
        return
    status = "VALID" if result.valid else "INVALID"
    print(f"Result: {status} | Quality score: {result.quality_score * 100:.1f}%", file=output)
    print(result.message, file=output)
    if not verbose:
        return

    if result.tier is not None:
        print(f"Tier: Level {result.tier.level} - {result.tier.name}", file=output)
    elif result.fallback_used:
        print("Tier: none (enhanced statistical analysis)", file=output)
    for test in result.tests:
        mark = PASS_MARK if test.passed else FAIL_MARK
        value = f"p={test.p_value:.4f}" if test.p_value is not None else "no p-value"
        print(f" {mark} {test.name}: {value}", file=output)
        if test.description:
            print(f"   {test.description}", file=output)
    if result.debug_file is not None:
        print(f"Bitstream written to: {result.debug_file}", file=output)


def build_markdown_report(
    result: "ValidateResult",
    *,
    source: Path | None = None,
    template: Template | None = None,
) -> str:
    """Generate a markdown report for ``result`` using ``template``."""

    template = template or DEFAULT_TEMPLATE.template
    timestamp = result.started_at.astimezone(timezone.utc).isoformat() if result.started_at else "-"
    return template.substitute(
        summary=_format_summary_section(result),
        input_overview=_format_input_overview(result, source),
        test_table=_format_test_table(result.tests),
        raw_output=(result.raw_output or result.message).rstrip(),
        timestamp=timestamp,
        duration=_format_duration(result.duration),
    )


def write_markdown_report(
    result: "ValidateResult",
    path: Path,
    *,
    source: Path | None = None,
    template: Template | None = None,
) -> Path:
    """Render and persist a markdown report for ``result``."""

    target = Path(path).expanduser().resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    content = build_markdown_report(result, source=source, template=template)
    target.write_text(content, encoding="utf-8")
    return target


# ---------------------------------------------------------------------------
# Helper formatting utilities
# ---------------------------------------------------------------------------

def _format_summary_section(result: "ValidateResult") -> str:
    if result.error_code is not None:
        verdict = f"REJECTED ({result.error_code})"
    else:
        verdict = "VALID" if result.valid else "INVALID"
    lines = [
        f"- **Result:** {verdict}",
        f"- **Quality score:** {result.quality_score * 100:.2f}%",
        f"- **Tests passed:** {result.tests_passed}/{result.total_tests}",
        f"- **Message:** {result.message}",
    ]
    return "\n".join(lines)


def _format_input_overview(result: "ValidateResult", source: Path | None) -> str:
    lines = []
    if source is not None:
        lines.append(f"- **Input file:** {source}")
    lines.append(f"- **Bits analysed:** {result.bit_count}")
    if result.tier is not None:
        lines.append(f"- **Tier:** Level {result.tier.level} - {result.tier.name}")
    elif result.fallback_used:
        lines.append("- **Tier:** none (enhanced statistical analysis)")
    if result.debug_file is not None:
        lines.append(f"- **Bitstream dump:** {result.debug_file}")
    return "\n".join(lines)


def _format_test_table(tests: Sequence["TestOutcome"]) -> str:
    header = "| Test | P-Value | Outcome |"
    separator = "| --- | --- | --- |"
    rows = [
        "| {} | {} | {} |".format(
            test.name,
            f"{test.p_value:.6f}" if test.p_value is not None else "-",
            "PASS" if test.passed else "FAIL",
        )
        for test in tests
    ]
    if not rows:
        rows.append("| _(no tests executed)_ | - | - |")
    return "\n".join([header, separator, *rows])


def _format_duration(duration: "timedelta | None") -> str:
    if duration is None:
        return "-"
    total_seconds = duration.total_seconds()
    if total_seconds < 1:
        return f"{total_seconds * 1000:.0f} ms"
    return f"{total_seconds:.2f} s"


__all__ = [
    "DEFAULT_TEMPLATE",
    "ReportTemplate",
    "build_fallback_output",
    "build_markdown_report",
    "build_suite_output",
    "print_console_summary",
    "write_markdown_report",
]
