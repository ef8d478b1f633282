"""Deployment error hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .process import CommandResult


class DeployError(RuntimeError):
    """A fatal failure that aborts the deployment run.

    ``step`` is filled in by the orchestrator with the state the run was in;
    ``command`` and ``output`` describe the external call that failed, when
    there was one.
    """

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        output: str = "",
        returncode: int | None = None,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.output = output
        self.returncode = returncode
        self.step: str | None = None

    @classmethod
    def from_result(cls, message: str, result: "CommandResult") -> "DeployError":
        return cls(
            message,
            command=result.command,
            output=result.output,
            returncode=result.returncode,
        )


class BuildError(DeployError):
    """The build command exited non-zero."""


class FilesystemError(DeployError):
    """Creating, clearing or copying a directory failed."""


class GitCommandError(DeployError):
    """A git subcommand exited with an unexpected status."""


class PushError(GitCommandError):
    """Pushing the deployment commit failed and pushes are configured as fatal."""


__all__ = [
    "BuildError",
    "DeployError",
    "FilesystemError",
    "GitCommandError",
    "PushError",
]
