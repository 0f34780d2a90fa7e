"""Registered test cases."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

type TestBody = Callable[[], Awaitable[Any] | Any]


@dataclass(frozen=True, kw_only=True)
class TestCase:
    """A named unit of work run by the harness.

    The body takes no arguments. Returning (or resolving to) a value means
    the test passed, raising means it failed.
    """

    __test__ = False

    name: str
    body: TestBody = field(repr=False)
