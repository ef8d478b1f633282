"""Load styling configuration from YAML."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import StylingConfig


class StylingConfigError(RuntimeError):
    """Raised when a styling configuration file cannot be parsed."""


def load_styling_config(path: Path | None = None) -> StylingConfig:
    """Load a :class:`StylingConfig` from ``path``, or the defaults when omitted."""

    if path is None:
        return StylingConfig()

    path = Path(path)
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise StylingConfigError(f"Cannot read styling config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise StylingConfigError(f"Failed to parse YAML in {path}: {exc}") from exc

    if document is None:
        return StylingConfig()
    if not isinstance(document, dict):
        raise StylingConfigError(f"Styling config {path} must contain a mapping")

    try:
        return StylingConfig.model_validate(document)
    except ValidationError as exc:
        raise StylingConfigError(f"Styling config validation error in {path}: {exc}") from exc


__all__ = ["StylingConfigError", "load_styling_config"]
