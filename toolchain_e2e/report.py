"""Rendering of test outcomes."""

import logging
from collections.abc import Sequence
from typing import Any

from toolchain_e2e.models.result import TestOutcome

PASS_MARKER = "PASS"
FAIL_MARKER = "FAIL"


def format_report_line(outcome: TestOutcome) -> str:
    """Format one outcome as ``[PASS] name`` or ``[FAIL] name: detail``.

    Continuation lines of a multi-line detail are indented so that every
    line starting with a marker belongs to exactly one test. A cleanup
    failure is appended on its own, whatever the verdict.
    """
    if outcome.success:
        line = f"[{PASS_MARKER}] {outcome.name}"
    else:
        detail = (outcome.detail or "").rstrip("\n").replace("\n", "\n    ")
        line = f"[{FAIL_MARKER}] {outcome.name}: {detail}"

    if outcome.cleanup_error:
        line += f" (cleanup failed: {outcome.cleanup_error})"
    return line


def format_report(outcomes: Sequence[TestOutcome]) -> str:
    """Format every outcome, one per line, in the order given."""
    return "\n".join(format_report_line(outcome) for outcome in outcomes)


def log_results_summary(log: logging.Logger, outcomes: Sequence[TestOutcome]) -> None:
    """Log a formatted summary of test outcomes."""
    passed = sum(1 for outcome in outcomes if outcome.success)

    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for outcome in outcomes:
        marker = PASS_MARKER if outcome.success else FAIL_MARKER
        log.info("%s %s (%.2fs)", marker, outcome.name, outcome.duration)
        if outcome.cleanup_error:
            log.warning("  Cleanup: %s", outcome.cleanup_error)

    log.info("%d passed, %d failed", passed, len(outcomes) - passed)


def format_output(outcomes: Sequence[TestOutcome]) -> dict[str, Any]:
    """Format outcomes for JSON output."""
    results = [
        {
            "name": outcome.name,
            "status": "pass" if outcome.success else "fail",
            "duration": outcome.duration,
            "detail": outcome.detail,
            "cleanup_error": outcome.cleanup_error,
        }
        for outcome in outcomes
    ]
    passed = sum(1 for outcome in outcomes if outcome.success)

    return {
        "total": len(results),
        "passed": passed,
        "failed": len(results) - passed,
        "cleanup_errors": sum(1 for outcome in outcomes if outcome.cleanup_error),
        "results": results,
    }


def exit_code(outcomes: Sequence[TestOutcome]) -> int:
    """Return 0 when every test passed, 1 otherwise."""
    return 0 if all(outcome.success for outcome in outcomes) else 1
