"""Concurrent execution of registered test cases."""

import asyncio
import inspect
import logging
from collections import Counter
from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager, nullcontext
from dataclasses import dataclass
from typing import Any

from toolchain_e2e.errors import HarnessError
from toolchain_e2e.models.case import TestCase
from toolchain_e2e.models.result import TestOutcome
from toolchain_e2e.pipeline import PipelineRun

log = logging.getLogger(__name__)


def describe_error(exc: BaseException) -> str:
    """Render an exception as ``"<Type>: <message>"`` followed by its notes."""
    message = str(exc)
    lines = [f"{type(exc).__name__}: {message}" if message else type(exc).__name__]
    lines.extend(getattr(exc, "__notes__", ()))
    return "\n".join(lines)


@dataclass(frozen=True, kw_only=True)
class TestHarness:
    """Runs test cases concurrently, isolating their failures."""

    __test__ = False

    max_concurrency: int | None = None

    async def run_all(self, cases: Sequence[TestCase]) -> Sequence[TestOutcome]:
        """Run every case and return one outcome per case.

        All cases are started without waiting for each other. Outcomes are
        returned in registration order, whatever order the cases finish in.

        Raises:
            ValueError: If two cases share a name

        """
        if not cases:
            log.info("No test cases registered")
            return []

        counts = Counter(case.name for case in cases)
        if duplicates := sorted(name for name, count in counts.items() if count > 1):
            raise ValueError(f"Duplicate test case names: {', '.join(duplicates)}")

        log.info("Running %d test case(s)...", len(cases))
        limiter: AbstractAsyncContextManager[Any] = (
            asyncio.Semaphore(self.max_concurrency)
            if self.max_concurrency is not None
            else nullcontext()
        )

        outcomes = await asyncio.gather(
            *(self._run_case(case, limiter) for case in cases)
        )
        log.info("Test execution completed")

        return outcomes

    async def _run_case(
        self, case: TestCase, limiter: AbstractAsyncContextManager[Any]
    ) -> TestOutcome:
        async with limiter:
            loop = asyncio.get_running_loop()
            started = loop.time()
            try:
                value = case.body()
                if inspect.isawaitable(value):
                    value = await value
            except Exception as exc:
                duration = loop.time() - started
                if isinstance(exc, HarnessError):
                    log.info(
                        "Test failed: name=%s error=%s", case.name, type(exc).__name__
                    )
                else:
                    log.error("Test %s raised: %s", case.name, exc, exc_info=exc)

                cleanup_error = None
                if isinstance(exc, HarnessError) and exc.cleanup_error is not None:
                    cleanup_error = describe_error(exc.cleanup_error)

                return TestOutcome(
                    name=case.name,
                    success=False,
                    detail=describe_error(exc),
                    duration=duration,
                    cleanup_error=cleanup_error,
                )

            duration = loop.time() - started
            log.info("Test passed: name=%s duration=%.2fs", case.name, duration)

            cleanup_error = None
            if isinstance(value, PipelineRun) and value.cleanup_error is not None:
                cleanup_error = describe_error(value.cleanup_error)

            return TestOutcome(
                name=case.name,
                success=True,
                duration=duration,
                cleanup_error=cleanup_error,
            )
