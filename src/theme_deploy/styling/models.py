"""Tailwind styling configuration consumed by the theme build."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

_LENGTH = re.compile(r"^\d+(\.\d+)?(px|rem|em)$")


def _default_screens() -> dict[str, str]:
    return {"sm": "490px", "md": "768px", "lg": "1040px", "xl": "1440px"}


def _default_padding() -> dict[str, str]:
    return {"DEFAULT": "1rem", "sm": "1rem", "md": "1.5rem", "lg": "2rem", "xl": "2.5rem"}


class StylingConfig(BaseModel):
    """Responsive breakpoints, container padding and content globs for Tailwind."""

    screens: dict[str, str] = Field(
        default_factory=_default_screens,
        description="Breakpoint name to minimum viewport width, smallest first.",
    )
    container_center: bool = Field(default=True, description="Center the container horizontally.")
    container_padding: dict[str, str] = Field(
        default_factory=_default_padding,
        description="Horizontal container padding per breakpoint; DEFAULT applies below the first.",
    )
    content: list[str] = Field(
        default_factory=lambda: ["**/*.{js,vue}", "../shopify/**/*.liquid"],
        description="Globs, relative to the config file, scanned for class usage.",
    )

    @field_validator("screens", "container_padding")
    @classmethod
    def _validate_lengths(cls, value: dict[str, str]) -> dict[str, str]:
        for name, length in value.items():
            if not _LENGTH.match(length.strip()):
                raise ValueError(f"{name!r} must be a CSS length in px, rem or em, got {length!r}")
        return {name.strip(): length.strip() for name, length in value.items()}

    @field_validator("content", mode="before")
    @classmethod
    def _ensure_list(cls, value: Any):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @model_validator(mode="after")
    def _check_padding_keys(self) -> "StylingConfig":
        unknown = [key for key in self.container_padding if key != "DEFAULT" and key not in self.screens]
        if unknown:
            raise ValueError(f"Container padding refers to unknown screens: {', '.join(unknown)}")
        return self


def _js_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def render_tailwind_config(config: StylingConfig) -> str:
    """Render ``tailwind.config.js`` module text for ``config``."""

    lines = [
        "/**",
        " * Tailwind CSS configuration file",
        " *",
        " * docs: https://tailwindcss.com/docs/configuration",
        " */",
        "const path = require('path')",
        "",
        "module.exports = {",
        "  theme: {",
        "    screens: {",
    ]
    lines.extend(f"      {_js_string(name)}: {_js_string(width)}," for name, width in config.screens.items())
    lines.extend(
        [
            "    },",
            "    extend: {},",
            "    container: {",
            f"      center: {'true' if config.container_center else 'false'},",
            "      padding: {",
        ]
    )
    for name, length in config.container_padding.items():
        key = name if name == "DEFAULT" else _js_string(name)
        lines.append(f"        {key}: {_js_string(length)},")
    lines.extend(
        [
            "      }",
            "    }",
            "  },",
            "  plugins: [],",
            "  content: [",
        ]
    )
    if config.content:
        globs = [f"    path.resolve(__dirname, {_js_string(glob)})" for glob in config.content]
        lines.append(",\n".join(globs))
    lines.extend(["  ]", "}", ""])
    return "\n".join(lines)


__all__ = ["StylingConfig", "render_tailwind_config"]
