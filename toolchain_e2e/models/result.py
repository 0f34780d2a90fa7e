"""Models for test execution results."""

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class TestOutcome:
    """Result of a single test case invocation."""

    __test__ = False

    name: str
    success: bool
    detail: str | None = None
    duration: float = 0.0
    cleanup_error: str | None = None
