"""Errors raised while running a compile-then-run pipeline."""


class HarnessError(Exception):
    """Base class for failures of a single test pipeline.

    ``cleanup_error`` is set when the artifact of the failing pipeline could
    not be removed either.
    """

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail
        self.cleanup_error: CleanupError | None = None


class SpawnError(HarnessError):
    """Raised when an executable cannot be spawned."""


class CompileError(HarnessError):
    """Raised when the compiler exits with a non-zero status."""


class RuntimeExecutionError(HarnessError):
    """Raised when the runtime exits with a non-zero status."""


class OutputMismatchError(HarnessError):
    """Raised when the program output differs from the expected output."""

    def __init__(self, actual: str, expected: str) -> None:
        super().__init__(actual)
        self.expected = expected

    def __str__(self) -> str:
        # Newlines and trailing whitespace are quoted so they stay visible.
        if "\n" in self.detail or self.detail != self.detail.rstrip():
            return repr(self.detail)
        return self.detail


class CleanupError(HarnessError):
    """Raised when a temporary artifact cannot be removed."""


class TestTimeoutError(HarnessError, TimeoutError):
    """Raised when a pipeline does not finish within its deadline."""

    __test__ = False
