"""CLI entry point for the compile-then-run test harness."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from toolchain_e2e.config import DEFAULT_TIMEOUT, HarnessConfig
from toolchain_e2e.definition_loader import load_suite_definition, resolve_suite_path
from toolchain_e2e.harness import TestHarness
from toolchain_e2e.registry import build_test_cases
from toolchain_e2e.report import (
    exit_code,
    format_output,
    format_report,
    log_results_summary,
)

EXIT_USAGE_ERROR = 2


async def run(
    config: HarnessConfig, cases_path: Path, json_output: bool = False
) -> int:
    """Run every case of the suite at ``cases_path`` and return the exit code."""
    log = logging.getLogger("toolchain_e2e")

    log.info("Loading test cases from %s", cases_path)
    try:
        suite = await load_suite_definition(cases_path)
    except FileNotFoundError:
        log.error("Suite file not found: %s", resolve_suite_path(cases_path))
        return EXIT_USAGE_ERROR
    except OSError as exc:
        log.error("Cannot read suite file %s: %s", cases_path, exc)
        return EXIT_USAGE_ERROR
    except (yaml.YAMLError, ValidationError, UnicodeDecodeError) as exc:
        log.error("Invalid suite file %s: %s", cases_path, exc)
        return EXIT_USAGE_ERROR

    source_root = resolve_suite_path(cases_path).parent
    cases = build_test_cases(suite, config, source_root)

    harness = TestHarness(max_concurrency=config.max_concurrency)
    outcomes = await harness.run_all(cases)

    log_results_summary(log, outcomes)

    if outcomes:
        print(format_report(outcomes))
    if json_output:
        print(json.dumps(format_output(outcomes), indent=2))

    return exit_code(outcomes)


def parse_timeout(value: str) -> float | None:
    """Parse a timeout in seconds, where 0 disables the deadline."""
    seconds = float(value)
    if seconds < 0:
        raise argparse.ArgumentTypeError("timeout must not be negative")
    return seconds or None


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Compile and run test programs, verifying their output"
    )
    parser.add_argument(
        "--compiler",
        type=Path,
        required=True,
        help="Path to the compiler executable",
    )
    parser.add_argument(
        "--runtime",
        default="wasmtime",
        help="Runtime executable used to run compiled artifacts",
    )
    parser.add_argument(
        "--cases",
        type=Path,
        required=True,
        help="Suite file (or directory containing cases.yaml)",
    )
    parser.add_argument(
        "--tmp-dir",
        type=Path,
        default=None,
        help="Directory for compiled artifacts (defaults to the system temp dir)",
    )
    parser.add_argument(
        "--timeout",
        type=parse_timeout,
        default=DEFAULT_TIMEOUT,
        help="Per-test deadline in seconds, 0 disables it",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Maximum number of tests running at once",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Also print a JSON summary of the results",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    options: dict[str, object] = {
        "compiler": args.compiler,
        "runtime": args.runtime,
        "timeout": args.timeout,
        "max_concurrency": args.max_concurrency,
    }
    if args.tmp_dir is not None:
        options["tmp_dir"] = args.tmp_dir

    try:
        config = HarnessConfig.model_validate(options)
    except ValidationError as exc:
        parser.error(str(exc))

    exit_status = asyncio.run(run(config, args.cases, json_output=args.json))
    sys.exit(exit_status)


if __name__ == "__main__":  # pragma: no cover
    main()
