"""External command execution."""

from .runner import (
    CommandNotFoundError,
    CommandResult,
    CommandRunner,
    CommandRunnerError,
    FakeCommandRunner,
)

__all__ = [
    "CommandNotFoundError",
    "CommandResult",
    "CommandRunner",
    "CommandRunnerError",
    "FakeCommandRunner",
]
