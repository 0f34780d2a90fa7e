"""Registration of suite cases as runnable test cases."""

from collections.abc import Sequence
from functools import partial
from pathlib import Path

from toolchain_e2e.config import HarnessConfig
from toolchain_e2e.models.case import TestCase
from toolchain_e2e.models.definition import SuiteDefinition
from toolchain_e2e.pipeline import run_case


def build_test_cases(
    suite: SuiteDefinition, config: HarnessConfig, source_root: Path
) -> Sequence[TestCase]:
    """Build one test case per suite entry, in suite order.

    Each body runs the compile-then-run pipeline for its entry, resolving the
    source path against ``source_root``.
    """
    return [
        TestCase(name=case.name, body=partial(run_case, config, case, source_root))
        for case in suite.cases
    ]
