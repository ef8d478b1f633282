"""Command-line entry point for theme deployments."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path

from . import __version__
from .config import ConfigLoadError, DeploySettings, load_settings
from .console import configure_logging
from .errors import DeployError
from .orchestrator import DeploymentOrchestrator
from .process import CommandRunner
from .styling import StylingConfigError, load_styling_config, render_tailwind_config

logger = logging.getLogger(__name__)


def _settings_from_args(args: argparse.Namespace) -> DeploySettings:
    overrides = {
        "source_dir": getattr(args, "source", None),
        "target_dir": getattr(args, "target", None),
        "remote_url": getattr(args, "remote_url", None),
        "target_branch": getattr(args, "branch", None),
        "build_command": "" if getattr(args, "skip_build", False) else getattr(args, "build_command", None),
        "commit_message": getattr(args, "message", None),
        "log_level": args.log_level,
    }
    if getattr(args, "no_commit", False):
        overrides["auto_commit"] = False
    if getattr(args, "no_push", False):
        overrides["auto_push"] = False
    if getattr(args, "strict_push", False):
        overrides["push_failure_fatal"] = True
    if args.no_color:
        overrides["color"] = False
    return load_settings(args.config, **overrides)


def cmd_deploy(args: argparse.Namespace) -> int:
    try:
        settings = _settings_from_args(args)
    except ConfigLoadError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level, color=settings.color)
    orchestrator = DeploymentOrchestrator(settings, runner=CommandRunner())
    try:
        report = asyncio.run(orchestrator.deploy())
    except DeployError as exc:
        logger.error("\n❌ Deployment failed during %s!", exc.step or "startup")
        logger.error("%s", exc)
        if exc.command:
            logger.error("Command: %s", exc.command)
        if exc.output:
            logger.error("%s", exc.output)
        return 1

    if getattr(args, "json", False):
        print(json.dumps(report.to_dict(), indent=2))
    return 0


def cmd_styling(args: argparse.Namespace) -> int:
    try:
        config = load_styling_config(args.styling_config)
    except StylingConfigError as exc:
        print(f"Styling config error: {exc}", file=sys.stderr)
        return 1

    text = render_tailwind_config(config)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
    else:
        print(text, end="")
    return 0


def _add_deploy_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--source", type=Path, help="Built theme directory to publish")
    parser.add_argument("--target", type=Path, help="Distribution working tree")
    parser.add_argument("--remote-url", help="Distribution repository URL")
    parser.add_argument("--branch", help="Dedicated deployment branch")
    parser.add_argument("--build-command", help="Shell command that builds the theme")
    parser.add_argument("--skip-build", action="store_true", help="Do not run the build command")
    parser.add_argument("--message", help="Commit message template ({timestamp} is substituted)")
    parser.add_argument("--no-commit", action="store_true", help="Stage changes but do not commit")
    parser.add_argument("--no-push", action="store_true", help="Commit but do not push")
    parser.add_argument(
        "--strict-push", action="store_true", help="Treat push failures as fatal"
    )
    parser.add_argument("--json", action="store_true", help="Print the deploy report as JSON")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="theme-deploy",
        description="Build the Shopify theme and publish it to the distribution repository.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        default=os.environ.get("THEME_DEPLOY_CONFIG") or None,
        help="YAML file with deployment settings (default: $THEME_DEPLOY_CONFIG)",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")
    parser.add_argument("--no-color", action="store_true", help="Disable coloured output")
    parser.set_defaults(func=cmd_deploy)

    sub = parser.add_subparsers(dest="cmd")

    p_deploy = sub.add_parser("deploy", help="Build, sync, commit and push (default)")
    _add_deploy_arguments(p_deploy)
    p_deploy.set_defaults(func=cmd_deploy)

    p_styling = sub.add_parser("styling", help="Render tailwind.config.js")
    p_styling.add_argument(
        "--styling-config", type=Path, default=None, help="YAML file with styling settings"
    )
    p_styling.add_argument("--output", help="Write to this path instead of stdout")
    p_styling.set_defaults(func=cmd_styling)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    exit_code = args.func(args)
    if exit_code:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
