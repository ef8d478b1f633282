"""Configuration management for theme deployments."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigLoadError(RuntimeError):
    """Raised when the deployment configuration cannot be loaded or validated."""


class DeploySettings(BaseSettings):
    """Immutable configuration for one deployment run.

    Values come from ``THEME_DEPLOY_*`` environment variables, an optional
    ``.env`` file, and keyword arguments (highest priority).
    """

    model_config = SettingsConfigDict(
        env_prefix="THEME_DEPLOY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    source_dir: Path = Field(default=Path("./shopify"), description="Built theme tree to publish.")
    target_dir: Path = Field(
        default=Path("../theme-dist"), description="Distribution working tree that receives the theme."
    )
    workdir: Path = Field(default=Path("."), description="Working directory of the build command.")
    remote_url: str | None = Field(default=None, description="Distribution repository URL.")
    remote_name: str = "origin"
    build_command: str = "npm run webpack:build"
    commit_message: str = "Auto-deploy: Theme update"
    target_branch: str | None = Field(
        default=None, description="Dedicated deployment branch; the current branch when unset."
    )
    default_branch: str = "main"
    auto_commit: bool = True
    auto_push: bool = True
    push_failure_fatal: bool = False
    init_repository: bool = True
    pull_on_existing: bool = True
    preserve: tuple[str, ...] = (".git",)
    log_level: str = "INFO"
    color: bool = True

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "THEME_DEPLOY_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("source_dir", "target_dir", "workdir")
    @classmethod
    def _expand_path(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("target_branch", "remote_url", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any):
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator("commit_message", "remote_name", "default_branch")
    @classmethod
    def _require_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("must not be empty")
        return normalized

    @field_validator("build_command")
    @classmethod
    def _strip_command(cls, value: str) -> str:
        return value.strip()


def load_settings(config_file: Path | None = None, **overrides: Any) -> DeploySettings:
    """Build settings from an optional YAML file plus explicit overrides.

    ``None`` overrides are ignored so that unset CLI flags fall through to the
    file and environment.
    """

    data: dict[str, Any] = {}
    if config_file is not None:
        path = Path(config_file)
        try:
            document = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigLoadError(f"Cannot read config file {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigLoadError(f"Failed to parse YAML in {path}: {exc}") from exc
        if document is not None:
            if not isinstance(document, dict):
                raise ConfigLoadError(f"Config file {path} must contain a mapping")
            data.update(document)

    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return DeploySettings(**data)
    except ValidationError as exc:
        raise ConfigLoadError(f"Invalid deployment configuration: {exc}") from exc


__all__ = ["ConfigLoadError", "DeploySettings", "load_settings"]
