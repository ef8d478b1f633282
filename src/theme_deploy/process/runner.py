"""Async runner for external commands (build tool, git)."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from ..console import COMMAND
from .utils import format_command, sanitize_environment

logger = logging.getLogger(__name__)

# Streamed output is read in blocks; a line longer than the limit is echoed in pieces.
_READ_SIZE = 1 << 16
_STREAM_LIMIT = 1 << 20


class CommandRunnerError(RuntimeError):
    """Base class for command runner errors."""


class CommandNotFoundError(CommandRunnerError):
    """Raised when an executable cannot be located."""


@dataclass(slots=True)
class CommandResult:
    """Holds the outcome of an external command invocation."""

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    shell: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command(self) -> str:
        if self.shell:
            return self.args[0] if self.args else ""
        return format_command(self.args)

    @property
    def output(self) -> str:
        """Captured text, stderr first since that is where tools explain failures."""

        parts = [part.strip() for part in (self.stderr, self.stdout) if part.strip()]
        return "\n".join(parts)


def _default_echo(line: str) -> None:
    print(line, flush=True)


class CommandRunner:
    """Execute external commands, one at a time, and capture their output."""

    def __init__(self, *, echo: Callable[[str], None] | None = None) -> None:
        self._echo = echo or _default_echo

    async def run(self, *args: str, cwd: Path | None = None) -> CommandResult:
        """Run argv without a shell, capturing stdout and stderr."""

        logger.info("Running: %s", format_command(args), extra=COMMAND)
        return await self._invoke(tuple(args), cwd=cwd, shell=False, stream=False)

    async def run_shell(
        self,
        command: str,
        *,
        cwd: Path | None = None,
        stream: bool = False,
    ) -> CommandResult:
        """Run ``command`` through the shell.

        With ``stream`` enabled, stdout and stderr are merged and each line is
        echoed as soon as it arrives; the full text is still captured in the
        result's ``stdout``.
        """

        logger.info("Running: %s", command, extra=COMMAND)
        return await self._invoke((command,), cwd=cwd, shell=True, stream=stream)

    async def _invoke(
        self,
        args: tuple[str, ...],
        *,
        cwd: Path | None,
        shell: bool,
        stream: bool,
    ) -> CommandResult:
        options = {
            "stdin": asyncio.subprocess.DEVNULL,
            "stdout": asyncio.subprocess.PIPE,
            "stderr": asyncio.subprocess.STDOUT if stream else asyncio.subprocess.PIPE,
            "cwd": str(cwd) if cwd is not None else None,
            "env": sanitize_environment(),
        }
        try:
            if shell:
                process = await asyncio.create_subprocess_shell(args[0], **options)
            else:
                process = await asyncio.create_subprocess_exec(*args, **options)
        except FileNotFoundError as exc:
            raise CommandNotFoundError(f"Cannot execute {args[0]!r}: {exc}") from exc

        if stream:
            try:
                captured = await self._stream(process)
                returncode = await process.wait()
            finally:
                if process.returncode is None:
                    process.kill()
                    await process.wait()
            return CommandResult(
                args=args, returncode=returncode, stdout=captured, stderr="", shell=shell
            )

        stdout_bytes, stderr_bytes = await process.communicate()
        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")
        return CommandResult(
            args=args, returncode=process.returncode, stdout=stdout, stderr=stderr, shell=shell
        )

    async def _stream(self, process: asyncio.subprocess.Process) -> str:
        """Echo merged output line by line and return everything that was read."""

        assert process.stdout is not None
        captured: list[str] = []
        pending = b""

        def emit(raw: bytes, terminator: str) -> None:
            text = raw.decode("utf-8", errors="replace")
            captured.append(text + terminator)
            self._echo(text.rstrip("\r"))

        while True:
            block = await process.stdout.read(_READ_SIZE)
            if not block:
                break
            pending += block
            *complete, pending = pending.split(b"\n")
            for raw in complete:
                emit(raw, "\n")
            if len(pending) > _STREAM_LIMIT:
                emit(pending, "")
                pending = b""
        if pending:
            emit(pending, "")
        return "".join(captured)


Handler = Callable[[tuple[str, ...], Path | None], CommandResult | None]


class FakeCommandRunner(CommandRunner):
    """Test double that simulates command responses.

    Each invocation is answered by ``handler`` when it returns a result,
    otherwise by the next queued response, otherwise by an empty success.
    """

    def __init__(
        self,
        responses: Iterable[CommandResult] | None = None,
        *,
        handler: Handler | None = None,
    ) -> None:
        super().__init__(echo=lambda _line: None)
        self._responses = list(responses or [])
        self._handler = handler
        self._invocations: list[tuple[str, ...]] = []
        self._directories: list[Path | None] = []

    async def _invoke(  # type: ignore[override]
        self,
        args: tuple[str, ...],
        *,
        cwd: Path | None,
        shell: bool,
        stream: bool,
    ) -> CommandResult:
        self._invocations.append(tuple(args))
        self._directories.append(cwd)
        if self._handler is not None:
            result = self._handler(tuple(args), cwd)
            if result is not None:
                return result
        if self._responses:
            return self._responses.pop(0)
        return CommandResult(args=tuple(args), returncode=0, stdout="", stderr="", shell=shell)

    @property
    def invocations(self) -> list[tuple[str, ...]]:
        return self._invocations

    @property
    def directories(self) -> list[Path | None]:
        return self._directories

