"""Mirror a built tree into the distribution working tree."""

from ..errors import FilesystemError
from .mirror import (
    DEFAULT_PRESERVE,
    check_disjoint,
    clear_directory,
    copy_tree,
    ensure_directory,
    list_tree,
)

__all__ = [
    "DEFAULT_PRESERVE",
    "FilesystemError",
    "check_disjoint",
    "clear_directory",
    "copy_tree",
    "ensure_directory",
    "list_tree",
]
