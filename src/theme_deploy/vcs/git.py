"""Git operations on the distribution working tree."""

from __future__ import annotations

from pathlib import Path

from ..errors import GitCommandError
from ..process import CommandResult, CommandRunner


class GitRepository:
    """Thin async wrapper over the git subcommands a deployment needs.

    Probes (``toplevel``, ``branch_exists``, ``remote_branch_exists``,
    ``has_staged_changes``, ``remote_url``, ``current_branch``) translate exit
    codes into values; every other command raises
    :class:`GitCommandError` when git fails.
    """

    def __init__(self, path: Path, runner: CommandRunner, *, executable: str = "git") -> None:
        self._path = Path(path)
        self._runner = runner
        self._executable = executable

    @property
    def path(self) -> Path:
        return self._path

    async def _git(self, *args: str, check: bool = True) -> CommandResult:
        result = await self._runner.run(self._executable, *args, cwd=self._path)
        if check and not result.ok:
            raise GitCommandError.from_result(
                f"git {args[0]} failed with exit code {result.returncode}", result
            )
        return result

    async def toplevel(self) -> Path | None:
        """Return the root of the work tree containing this path, if any."""

        result = await self._git("rev-parse", "--show-toplevel", check=False)
        if not result.ok or not result.stdout.strip():
            return None
        return Path(result.stdout.strip())

    async def init(self, *, initial_branch: str | None = None) -> None:
        await self._git("init")
        if initial_branch:
            # Works on every git version, unlike ``git init -b``.
            await self._git("symbolic-ref", "HEAD", f"refs/heads/{initial_branch}")

    async def add_remote(self, name: str, url: str) -> None:
        await self._git("remote", "add", name, url)

    async def remote_url(self, name: str) -> str | None:
        result = await self._git("remote", "get-url", name, check=False)
        if not result.ok:
            return None
        return result.stdout.strip() or None

    async def remote_branch_exists(self, remote: str, branch: str) -> bool | None:
        """Return whether ``remote`` has ``branch``, or ``None`` when it cannot be reached."""

        result = await self._git(
            "ls-remote", "--exit-code", "--heads", remote, f"refs/heads/{branch}", check=False
        )
        if result.returncode == 0:
            return True
        if result.returncode == 2:
            return False
        return None

    async def pull(self, remote: str, branch: str) -> None:
        await self._git("pull", remote, branch)

    async def branch_exists(self, branch: str) -> bool:
        result = await self._git(
            "show-ref", "--verify", "--quiet", f"refs/heads/{branch}", check=False
        )
        if result.returncode in (0, 1):
            return result.ok
        raise GitCommandError.from_result(f"Cannot determine whether branch {branch!r} exists", result)

    async def current_branch(self) -> str | None:
        """Return the checked-out branch name, or ``None`` on a detached HEAD."""

        result = await self._git("symbolic-ref", "--quiet", "--short", "HEAD", check=False)
        if not result.ok:
            return None
        return result.stdout.strip() or None

    async def checkout(self, branch: str, *, create: bool = False) -> None:
        if create:
            await self._git("checkout", "-b", branch)
        else:
            await self._git("checkout", branch)

    async def stage_all(self) -> None:
        await self._git("add", "--all", ".")

    async def has_staged_changes(self) -> bool:
        """Return whether the index differs from the last commit."""

        result = await self._git("diff", "--staged", "--quiet", "--", ".", check=False)
        if result.returncode == 0:
            return False
        if result.returncode == 1:
            return True
        raise GitCommandError.from_result("Cannot inspect staged changes", result)

    async def commit(self, message: str) -> str:
        """Commit the index and return the new commit sha."""

        await self._git("commit", "-m", message)
        result = await self._git("rev-parse", "HEAD")
        return result.stdout.strip()

    async def push(self, remote: str, branch: str, *, set_upstream: bool = False) -> None:
        args = ["push"]
        if set_upstream:
            args.append("--set-upstream")
        await self._git(*args, remote, branch)


__all__ = ["GitRepository"]
