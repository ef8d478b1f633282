"""Build the theme and publish it to the distribution working tree."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from .config import DeploySettings
from .console import BANNER, INFO, STEP, SUCCESS
from .errors import BuildError, DeployError, FilesystemError, GitCommandError, PushError
from .process import CommandRunner, CommandRunnerError
from .sync import check_disjoint, clear_directory, copy_tree, ensure_directory
from .vcs import GitRepository

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class DeployState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    PREPARING_TARGET = "preparing_target"
    SYNCING = "syncing"
    STAGING = "staging"
    NO_CHANGES = "no_changes"
    COMMITTING = "committing"
    PUSHING = "pushing"
    DONE = "done"
    FAILED = "failed"


class DeployStatus(str, Enum):
    """How a successful run ended."""

    SYNCED = "synced"
    NO_CHANGES = "no_changes"
    STAGED = "staged"
    COMMITTED = "committed"
    PUSHED = "pushed"
    PUSH_FAILED = "push_failed"


@dataclass(slots=True)
class DeployReport:
    """Summary of a completed deployment run."""

    status: DeployStatus
    target: str
    remote_url: str | None = None
    branch: str | None = None
    copied: list[str] = field(default_factory=list)
    commit_message: str | None = None
    commit_sha: str | None = None
    push_error: str | None = None
    states: list[DeployState] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["status"] = self.status.value
        payload["states"] = [state.value for state in self.states]
        return payload


def render_commit_message(template: str, moment: datetime) -> str:
    """Combine the configured template with a UTC timestamp."""

    timestamp = moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)
    if "{timestamp}" in template:
        return template.replace("{timestamp}", timestamp)
    return f"{template} - {timestamp}"


@dataclass(slots=True)
class _TargetContext:
    repo: GitRepository | None
    branch: str | None
    created_branch: bool = False
    created_repo: bool = False


class DeploymentOrchestrator:
    """Run one build-and-publish cycle for the configured theme.

    The orchestrator is single-use per run but can be invoked repeatedly; every
    call to :meth:`deploy` starts from :attr:`DeployState.IDLE`.
    """

    def __init__(
        self,
        settings: DeploySettings,
        *,
        runner: CommandRunner | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings
        self._runner = runner or CommandRunner()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._state = DeployState.IDLE
        self._history: list[DeployState] = []

    @property
    def state(self) -> DeployState:
        return self._state

    def _transition(self, state: DeployState) -> None:
        logger.debug("Deploy state %s -> %s", self._state.value, state.value)
        self._state = state
        self._history.append(state)

    async def deploy(self) -> DeployReport:
        """Execute the deployment, raising :class:`DeployError` on fatal failures."""

        self._state = DeployState.IDLE
        self._history = [DeployState.IDLE]
        try:
            return await self._deploy()
        except DeployError as exc:
            exc.step = self._state.value
            self._transition(DeployState.FAILED)
            raise
        except CommandRunnerError as exc:
            error = DeployError(str(exc))
            error.step = self._state.value
            self._transition(DeployState.FAILED)
            raise error from exc

    async def _deploy(self) -> DeployReport:
        settings = self._settings
        source = Path(settings.source_dir)
        target = Path(settings.target_dir)

        logger.info("\n🚀 Starting Theme Deployment", extra=BANNER)
        logger.info("================================", extra=BANNER)

        self._transition(DeployState.BUILDING)
        await self._build()
        if not source.is_dir():
            raise FilesystemError(f"Build did not produce source directory {source}")

        self._transition(DeployState.PREPARING_TARGET)
        context = await self._prepare_target(source, target)

        self._transition(DeployState.SYNCING)
        logger.info("\n🧹 Cleaning distribution directory...", extra=STEP)
        clear_directory(target, settings.preserve)
        logger.info("\n📋 Copying theme files...", extra=STEP)
        copied = copy_tree(source, target, settings.preserve)
        logger.info("✅ Copied %d files", len(copied), extra=SUCCESS)

        report = DeployReport(
            status=DeployStatus.SYNCED,
            target=str(target),
            remote_url=settings.remote_url,
            branch=context.branch,
            copied=copied,
            states=self._history,
        )

        repo = context.repo
        if repo is None:
            self._transition(DeployState.DONE)
            self._summarize(report)
            return report

        self._transition(DeployState.STAGING)
        logger.info("\n📤 Staging changes...", extra=STEP)
        await repo.stage_all()
        if not await repo.has_staged_changes():
            self._transition(DeployState.NO_CHANGES)
            report.status = DeployStatus.NO_CHANGES
            logger.info("ℹ️  No changes to deploy", extra=INFO)
            self._summarize(report)
            return report

        if not settings.auto_commit:
            self._transition(DeployState.DONE)
            report.status = DeployStatus.STAGED
            logger.info(
                "ℹ️  Changes staged in %s; commit and push them manually.", target, extra=INFO
            )
            self._summarize(report)
            return report

        self._transition(DeployState.COMMITTING)
        message = render_commit_message(settings.commit_message, self._clock())
        report.commit_message = message
        report.commit_sha = await repo.commit(message)
        logger.info("✅ Committed %s", report.commit_sha[:12], extra=SUCCESS)
        report.status = DeployStatus.COMMITTED

        if settings.auto_push:
            self._transition(DeployState.PUSHING)
            await self._push(repo, context, report)
        else:
            logger.info(
                "ℹ️  Push skipped; run: git push %s %s",
                settings.remote_name,
                context.branch,
                extra=INFO,
            )

        self._transition(DeployState.DONE)
        self._summarize(report)
        return report

    async def _build(self) -> None:
        command = self._settings.build_command
        if not command:
            logger.info("\n📦 No build command configured, skipping build", extra=STEP)
            return
        logger.info("\n📦 Building theme...", extra=STEP)
        result = await self._runner.run_shell(command, cwd=Path(self._settings.workdir), stream=True)
        if not result.ok:
            raise BuildError.from_result(f"Build failed with exit code {result.returncode}", result)
        logger.info("✅ Theme built successfully!", extra=SUCCESS)

    async def _prepare_target(self, source: Path, target: Path) -> _TargetContext:
        settings = self._settings
        check_disjoint(source, target)

        existed = target.exists()
        if not existed:
            logger.info("\n📁 Creating distribution directory %s...", target, extra=STEP)
        ensure_directory(target)

        repo = GitRepository(target, self._runner)
        created_repo = False
        toplevel = await repo.toplevel()
        owns_repository = toplevel is not None and toplevel.resolve() == target.resolve()
        if not owns_repository:
            if settings.init_repository:
                logger.info("\n📁 Initializing distribution repository...", extra=STEP)
                await repo.init(initial_branch=settings.default_branch)
                created_repo = True
            elif toplevel is None:
                logger.info(
                    "ℹ️  %s is not a git work tree; files will be synced only", target, extra=INFO
                )
                return _TargetContext(repo=None, branch=None)

        if settings.remote_url and await repo.remote_url(settings.remote_name) is None:
            await repo.add_remote(settings.remote_name, settings.remote_url)
            logger.info(
                "✅ Remote %s -> %s registered", settings.remote_name, settings.remote_url, extra=SUCCESS
            )

        created_branch = False
        branch = settings.target_branch
        if branch:
            if await repo.branch_exists(branch):
                if await repo.current_branch() != branch:
                    await repo.checkout(branch)
            else:
                logger.info("\n🌿 Creating deployment branch %s...", branch, extra=STEP)
                await repo.checkout(branch, create=True)
                created_branch = True
        else:
            branch = await repo.current_branch() or settings.default_branch

        can_pull = (
            existed
            and settings.pull_on_existing
            and not created_repo
            and not created_branch
            and await repo.remote_url(settings.remote_name) is not None
        )
        if can_pull:
            available = await repo.remote_branch_exists(settings.remote_name, branch)
            if available:
                logger.info("\n🔄 Updating existing distribution repository...", extra=STEP)
                await repo.pull(settings.remote_name, branch)
            elif available is None:
                logger.info(
                    "ℹ️  Remote %s is unreachable; skipping pull", settings.remote_name, extra=INFO
                )
            else:
                logger.info(
                    "ℹ️  %s/%s does not exist yet; skipping pull",
                    settings.remote_name,
                    branch,
                    extra=INFO,
                )

        return _TargetContext(
            repo=repo, branch=branch, created_branch=created_branch, created_repo=created_repo
        )

    async def _push(self, repo: GitRepository, context: _TargetContext, report: DeployReport) -> None:
        settings = self._settings
        branch = context.branch or settings.default_branch
        try:
            await repo.push(
                settings.remote_name,
                branch,
                set_upstream=context.created_branch or context.created_repo,
            )
        except GitCommandError as exc:
            if settings.push_failure_fatal:
                raise PushError(
                    f"Push to {settings.remote_name}/{branch} failed",
                    command=exc.command,
                    output=exc.output,
                    returncode=exc.returncode,
                ) from exc
            report.status = DeployStatus.PUSH_FAILED
            report.push_error = exc.output or str(exc)
            logger.warning("⚠️  Push to %s/%s failed: %s", settings.remote_name, branch, report.push_error)
            logger.warning(
                "Push manually from %s with: git push -u %s %s",
                report.target,
                settings.remote_name,
                branch,
            )
            return
        report.status = DeployStatus.PUSHED
        logger.info("✅ Changes pushed to distribution repository!", extra=SUCCESS)

    def _summarize(self, report: DeployReport) -> None:
        logger.info("\n🎉 Deployment Complete!", extra=BANNER)
        logger.info("================================", extra=BANNER)
        logger.info("Status: %s", report.status.value, extra=SUCCESS)
        logger.info("Target: %s", report.target, extra=INFO)
        if report.remote_url:
            logger.info("Distribution repo: %s", report.remote_url, extra=INFO)
        if report.branch:
            logger.info("Branch: %s", report.branch, extra=INFO)
        logger.info("Copied %d files", len(report.copied), extra=INFO)
        if report.commit_sha:
            logger.info("Commit: %s (%s)", report.commit_sha[:12], report.commit_message, extra=INFO)


__all__ = [
    "DeployReport",
    "DeployState",
    "DeployStatus",
    "DeploymentOrchestrator",
    "render_commit_message",
]
