"""Version control collaborators."""

from ..errors import GitCommandError
from .git import GitRepository

__all__ = ["GitCommandError", "GitRepository"]
