"""Compile-then-run pipeline for a single test case."""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from toolchain_e2e.config import HarnessConfig
from toolchain_e2e.errors import (
    CleanupError,
    CompileError,
    HarnessError,
    OutputMismatchError,
    RuntimeExecutionError,
    SpawnError,
    TestTimeoutError,
)
from toolchain_e2e.models.definition import CaseDefinition
from toolchain_e2e.process import Command, run_command, string_as_input_stream

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class PipelineRun:
    """Result of a pipeline whose output matched the expectation."""

    artifact: Path
    output: str
    cleanup_error: CleanupError | None = None


def artifact_path(tmp_dir: Path, suffix: str = ".wasm") -> Path:
    """Return a fresh, uniquely named artifact path inside ``tmp_dir``."""
    return tmp_dir / f"{uuid.uuid4()}{suffix}"


async def compile_source(compiler: Command, source: Path, artifact: Path) -> None:
    """Compile ``source`` into ``artifact``.

    Raises:
        SpawnError: If the compiler cannot be started
        CompileError: If the compiler exits with a non-zero status

    """
    try:
        result = await run_command(compiler, ["-o", artifact, source])
    except SpawnError as exc:
        raise SpawnError(f"compiler: {exc.detail}") from exc
    if result.exit_code != 0:
        raise CompileError(
            result.stderr or f"Compiler exited with code {result.exit_code}"
        )


async def execute_artifact(runtime: Command, artifact: Path, stdin: str = "") -> str:
    """Run ``artifact`` with ``stdin`` as its input and return its stdout.

    Raises:
        SpawnError: If the runtime cannot be started
        RuntimeExecutionError: If the runtime exits with a non-zero status

    """
    source = string_as_input_stream(stdin) if stdin else None
    try:
        result = await run_command(runtime, [artifact], source)
    except SpawnError as exc:
        raise SpawnError(f"runtime: {exc.detail}") from exc
    if result.exit_code != 0:
        raise RuntimeExecutionError(
            result.stderr or f"Runtime exited with code {result.exit_code}"
        )
    return result.stdout


def check_output(actual: str, expected: str) -> None:
    """Raise OutputMismatchError unless ``actual`` equals ``expected`` exactly."""
    if actual != expected:
        raise OutputMismatchError(actual, expected)


def remove_artifact(artifact: Path) -> CleanupError | None:
    """Delete ``artifact`` and return the error if that was not possible.

    A missing artifact is not an error: the compiler may have failed before
    writing it.
    """
    try:
        artifact.unlink(missing_ok=True)
    except OSError as exc:
        log.warning("Failed to remove artifact %s: %s", artifact, exc)
        return CleanupError(f"Cannot remove artifact {artifact}: {exc}")
    return None


async def run_case(
    config: HarnessConfig, case: CaseDefinition, source_root: Path
) -> PipelineRun:
    """Compile, run and verify one case, removing its artifact afterwards.

    The artifact is removed on every path. A cleanup failure never changes
    the verdict: on a failing case it is set as ``cleanup_error`` on the stage
    error, on a passing case it is returned on the result.
    """
    artifact = artifact_path(config.tmp_dir, config.artifact_suffix)
    source = source_root / case.source
    log.debug("Running case %s: source=%s artifact=%s", case.name, source, artifact)

    try:
        output = await _run_stages(config, case, source, artifact)
    except BaseException as exc:
        if (cleanup_error := remove_artifact(artifact)) is not None:
            if isinstance(exc, HarnessError):
                exc.cleanup_error = cleanup_error
            else:
                exc.add_note(f"CleanupError: {cleanup_error}")
        raise

    return PipelineRun(
        artifact=artifact, output=output, cleanup_error=remove_artifact(artifact)
    )


async def _run_stages(
    config: HarnessConfig, case: CaseDefinition, source: Path, artifact: Path
) -> str:
    try:
        async with asyncio.timeout(config.timeout):
            await compile_source(config.compiler, source, artifact)
            output = await execute_artifact(config.runtime, artifact, case.stdin)
    except TimeoutError as exc:
        raise TestTimeoutError(
            f"Test did not complete within {config.timeout} seconds"
        ) from exc

    check_output(output, case.expected_output)
    return output
