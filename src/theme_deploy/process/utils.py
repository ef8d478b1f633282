"""Helpers shared by the command runner.

The build tool and git run in an environment without the virtualenv variables
of the interpreter hosting the deploy, so ``npm`` scripts and git hooks resolve
their own toolchains. ``format_command`` renders argv for progress and error
messages.
"""

from __future__ import annotations

import os
import shlex
from typing import Mapping, Sequence

_SANITIZED_VARS = {
    "PYTHONHOME",
    "PYTHONPATH",
    "VIRTUAL_ENV",
    "PIP_RESPECT_VIRTUALENV",
}


def sanitize_environment(additional: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return a sanitized environment suitable for subprocess execution."""

    env = dict(os.environ)
    for key in _SANITIZED_VARS:
        env.pop(key, None)
    if additional:
        env.update(additional)
    return env


def format_command(args: Sequence[str]) -> str:
    """Render argv the way a user would type it into a shell."""

    return " ".join(shlex.quote(arg) for arg in args)
