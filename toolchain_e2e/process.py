"""Spawning of external processes with piped standard streams."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterable, AsyncIterator, Sequence
from dataclasses import dataclass, field
from os import PathLike

from toolchain_e2e.collector import collect_stream
from toolchain_e2e.errors import SpawnError

log = logging.getLogger(__name__)

type InputSource = AsyncIterable[bytes]
type Command = str | PathLike[str]


async def empty_stream() -> AsyncIterator[bytes]:
    """Input source that is exhausted immediately."""
    return
    yield  # pragma: no cover


async def string_as_input_stream(text: str) -> AsyncIterator[bytes]:
    """Input source yielding ``text`` encoded as UTF-8."""
    yield text.encode()


@dataclass(frozen=True, kw_only=True)
class ProcessHandle:
    """A spawned external process and its standard streams.

    The handle is created by :func:`spawn_process` and must not be reused once
    the process has exited.
    """

    process: asyncio.subprocess.Process = field(repr=False)
    stdin: asyncio.StreamWriter = field(repr=False)
    stdout: asyncio.StreamReader = field(repr=False)
    stderr: asyncio.StreamReader = field(repr=False)
    exit_code: asyncio.Task[int] = field(repr=False)
    input_task: asyncio.Task[None] = field(repr=False)

    @property
    def pid(self) -> int:
        return self.process.pid

    async def wait(self) -> int:
        """Wait for the process to exit and return its exit code."""
        return await self.exit_code

    async def kill(self) -> None:
        """Kill the process if it is still running and reap it."""
        self.input_task.cancel()
        if self.process.returncode is None:
            log.debug("Killing process pid=%d", self.pid)
            with contextlib.suppress(ProcessLookupError):
                self.process.kill()
        await self.process.wait()


@dataclass(frozen=True, kw_only=True)
class CommandResult:
    """Exit code and decoded output of a fully drained process."""

    exit_code: int
    stdout: str
    stderr: str


async def spawn_process(
    command: Command,
    args: Sequence[str | PathLike[str]] = (),
    stdin: InputSource | None = None,
) -> ProcessHandle:
    """Spawn ``command`` with piped standard streams.

    Forwarding of ``stdin`` into the child starts immediately in a background
    task and runs independently of whoever drains the output streams, so a
    child blocked on a full stdout pipe never stalls its own input.

    Raises:
        SpawnError: If the executable cannot be started

    """
    try:
        process = await asyncio.create_subprocess_exec(
            command,
            *args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise SpawnError(f"Cannot spawn {str(command)!r}: {exc}") from exc

    log.debug("Spawned %s (pid=%d)", command, process.pid)

    # All three pipes were requested above.
    assert process.stdin is not None
    assert process.stdout is not None
    assert process.stderr is not None

    source = stdin if stdin is not None else empty_stream()
    return ProcessHandle(
        process=process,
        stdin=process.stdin,
        stdout=process.stdout,
        stderr=process.stderr,
        exit_code=asyncio.create_task(process.wait()),
        input_task=asyncio.create_task(_forward_input(source, process.stdin)),
    )


async def _forward_input(source: InputSource, sink: asyncio.StreamWriter) -> None:
    """Copy ``source`` into ``sink`` and close it once exhausted."""
    try:
        async for chunk in source:
            sink.write(chunk)
            await sink.drain()
    except (BrokenPipeError, ConnectionResetError):
        # The child exited without consuming all of its input.
        log.debug("Process closed its input before the source was exhausted")
    finally:
        sink.close()
        with contextlib.suppress(BrokenPipeError, ConnectionResetError):
            await sink.wait_closed()


async def run_command(
    command: Command,
    args: Sequence[str | PathLike[str]] = (),
    stdin: InputSource | None = None,
) -> CommandResult:
    """Run ``command`` to completion and collect its output.

    The exit status and both output streams are awaited together in one task
    group. If the caller is cancelled, e.g. by an expiring deadline, the child
    is killed and reaped before the cancellation propagates.
    """
    handle = await spawn_process(command, args, stdin)
    try:
        async with asyncio.TaskGroup() as tg:
            exit_task = tg.create_task(handle.wait())
            stdout_task = tg.create_task(collect_stream(handle.stdout))
            stderr_task = tg.create_task(collect_stream(handle.stderr))
        await handle.input_task
    except BaseException:
        await handle.kill()
        raise

    log.debug("Process %s exited with code %d", command, exit_task.result())
    return CommandResult(
        exit_code=exit_task.result(),
        stdout=stdout_task.result(),
        stderr=stderr_task.result(),
    )
