from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from theme_deploy.process import CommandResult, FakeCommandRunner
from theme_deploy.vcs import GitCommandError, GitRepository


def result(returncode: int = 0, stdout: str = "", stderr: str = "") -> CommandResult:
    return CommandResult(args=("git",), returncode=returncode, stdout=stdout, stderr=stderr)


def make_repo(*responses: CommandResult) -> tuple[GitRepository, FakeCommandRunner]:
    runner = FakeCommandRunner(responses)
    return GitRepository(Path("/srv/dist"), runner), runner


def test_commands_run_inside_repository() -> None:
    repo, runner = make_repo()

    asyncio.run(repo.stage_all())

    assert runner.invocations == [("git", "add", "--all", ".")]
    assert runner.directories == [Path("/srv/dist")]


def test_init_points_head_at_initial_branch() -> None:
    repo, runner = make_repo()

    asyncio.run(repo.init(initial_branch="main"))

    assert runner.invocations == [
        ("git", "init"),
        ("git", "symbolic-ref", "HEAD", "refs/heads/main"),
    ]


@pytest.mark.parametrize(
    ("returncode", "expected"),
    [(0, False), (1, True)],
)
def test_has_staged_changes_maps_exit_codes(returncode: int, expected: bool) -> None:
    repo, runner = make_repo(result(returncode))

    assert asyncio.run(repo.has_staged_changes()) is expected
    assert runner.invocations == [("git", "diff", "--staged", "--quiet", "--", ".")]


def test_has_staged_changes_raises_on_git_error() -> None:
    repo, _ = make_repo(result(128, stderr="fatal: not a git repository"))

    with pytest.raises(GitCommandError) as excinfo:
        asyncio.run(repo.has_staged_changes())

    assert "not a git repository" in excinfo.value.output


def test_branch_exists_probe() -> None:
    repo, runner = make_repo(result(0), result(1))

    assert asyncio.run(repo.branch_exists("deploy")) is True
    assert asyncio.run(repo.branch_exists("missing")) is False
    assert runner.invocations[0] == ("git", "show-ref", "--verify", "--quiet", "refs/heads/deploy")


def test_toplevel_and_remote_probes() -> None:
    repo, _ = make_repo(
        result(0, stdout="/srv/dist\n"),
        result(128, stderr="fatal: not a git repository"),
        result(0, stdout="git@example.com:theme-dist.git\n"),
        result(2, stderr="error: No such remote"),
    )

    assert asyncio.run(repo.toplevel()) == Path("/srv/dist")
    assert asyncio.run(repo.toplevel()) is None
    assert asyncio.run(repo.remote_url("origin")) == "git@example.com:theme-dist.git"
    assert asyncio.run(repo.remote_url("upstream")) is None


def test_current_branch_returns_none_when_detached() -> None:
    repo, _ = make_repo(result(0, stdout="deploy\n"), result(1))

    assert asyncio.run(repo.current_branch()) == "deploy"
    assert asyncio.run(repo.current_branch()) is None


def test_checkout_existing_and_new_branch() -> None:
    repo, runner = make_repo()

    asyncio.run(repo.checkout("deploy"))
    asyncio.run(repo.checkout("release", create=True))

    assert runner.invocations == [
        ("git", "checkout", "deploy"),
        ("git", "checkout", "-b", "release"),
    ]


def test_commit_returns_new_sha() -> None:
    repo, runner = make_repo(result(0), result(0, stdout="0123456789abcdef\n"))

    sha = asyncio.run(repo.commit("Auto-deploy: Theme update - 2025-01-01 00:00:00"))

    assert sha == "0123456789abcdef"
    assert runner.invocations[0] == (
        "git",
        "commit",
        "-m",
        "Auto-deploy: Theme update - 2025-01-01 00:00:00",
    )


def test_push_with_upstream_flag() -> None:
    repo, runner = make_repo()

    asyncio.run(repo.push("origin", "deploy", set_upstream=True))
    asyncio.run(repo.push("origin", "deploy"))

    assert runner.invocations == [
        ("git", "push", "--set-upstream", "origin", "deploy"),
        ("git", "push", "origin", "deploy"),
    ]


def test_failed_command_carries_command_and_output() -> None:
    repo, _ = make_repo(result(1, stderr="fatal: couldn't find remote ref main"))

    with pytest.raises(GitCommandError) as excinfo:
        asyncio.run(repo.pull("origin", "main"))

    error = excinfo.value
    assert error.returncode == 1
    assert "couldn't find remote ref" in error.output
    assert "git pull failed" in str(error)


def test_remote_branch_probe_distinguishes_missing_from_unreachable() -> None:
    repo, runner = make_repo(
        result(0, stdout="4b825dc\trefs/heads/deploy\n"),
        result(2),
        result(128, stderr="fatal: '/srv/nowhere.git' does not appear to be a git repository"),
    )

    assert asyncio.run(repo.remote_branch_exists("origin", "deploy")) is True
    assert asyncio.run(repo.remote_branch_exists("origin", "deploy")) is False
    assert asyncio.run(repo.remote_branch_exists("origin", "deploy")) is None
    assert runner.invocations[0] == (
        "git", "ls-remote", "--exit-code", "--heads", "origin", "refs/heads/deploy",
    )
