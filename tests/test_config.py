from __future__ import annotations

from pathlib import Path
import textwrap

import pytest
from pydantic import ValidationError

from theme_deploy.config import ConfigLoadError, DeploySettings, load_settings


def test_defaults_match_theme_layout() -> None:
    settings = DeploySettings()

    assert settings.source_dir == Path("shopify")
    assert settings.build_command == "npm run webpack:build"
    assert settings.commit_message == "Auto-deploy: Theme update"
    assert settings.target_branch is None
    assert settings.auto_commit and settings.auto_push
    assert not settings.push_failure_fatal
    assert settings.preserve == (".git",)


def test_settings_are_immutable() -> None:
    settings = DeploySettings()

    with pytest.raises(ValidationError):
        settings.target_branch = "deploy"  # type: ignore[misc]


def test_environment_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("THEME_DEPLOY_TARGET_BRANCH", "production")
    monkeypatch.setenv("THEME_DEPLOY_AUTO_PUSH", "false")
    monkeypatch.setenv("THEME_DEPLOY_LOG_LEVEL", "debug")

    settings = DeploySettings()

    assert settings.target_branch == "production"
    assert settings.auto_push is False
    assert settings.log_level == "DEBUG"


def test_blank_branch_means_current_branch() -> None:
    assert DeploySettings(target_branch="  ").target_branch is None


def test_rejects_unknown_log_level() -> None:
    with pytest.raises(ValidationError):
        DeploySettings(log_level="chatty")


def test_rejects_empty_commit_message() -> None:
    with pytest.raises(ValidationError):
        DeploySettings(commit_message="   ")


def test_load_settings_layers_file_and_overrides(tmp_path: Path) -> None:
    config = tmp_path / "deploy.yaml"
    config.write_text(
        textwrap.dedent(
            """
            source_dir: build/shopify
            target_dir: ../dist
            remote_url: https://example.com/theme-dist.git
            target_branch: deploy
            auto_push: false
            """
        ),
        encoding="utf-8",
    )

    settings = load_settings(config, target_branch="hotfix", commit_message=None)

    assert settings.source_dir == Path("build/shopify")
    assert settings.remote_url == "https://example.com/theme-dist.git"
    assert settings.target_branch == "hotfix"
    assert settings.auto_push is False
    assert settings.commit_message == "Auto-deploy: Theme update"


def test_load_settings_reports_invalid_yaml(tmp_path: Path) -> None:
    config = tmp_path / "deploy.yaml"
    config.write_text("target_dir: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigLoadError):
        load_settings(config)


def test_load_settings_reports_validation_error(tmp_path: Path) -> None:
    config = tmp_path / "deploy.yaml"
    config.write_text("log_level: chatty\n", encoding="utf-8")

    with pytest.raises(ConfigLoadError):
        load_settings(config)


def test_load_settings_requires_mapping(tmp_path: Path) -> None:
    config = tmp_path / "deploy.yaml"
    config.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigLoadError):
        load_settings(config)


def test_load_settings_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError):
        load_settings(tmp_path / "absent.yaml")
