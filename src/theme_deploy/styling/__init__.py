"""Styling configuration models, loader and renderer."""

from .loader import StylingConfigError, load_styling_config
from .models import StylingConfig, render_tailwind_config

__all__ = [
    "StylingConfig",
    "StylingConfigError",
    "load_styling_config",
    "render_tailwind_config",
]
