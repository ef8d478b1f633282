"""Destructive directory mirroring."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Collection, Iterable

from ..errors import FilesystemError

DEFAULT_PRESERVE = (".git",)


def ensure_directory(path: Path) -> bool:
    """Create ``path`` (and parents) if needed; return whether it was created."""

    path = Path(path)
    if path.is_dir():
        return False
    try:
        path.mkdir(parents=True, exist_ok=False)
    except OSError as exc:
        raise FilesystemError(f"Cannot create directory {path}: {exc}") from exc
    return True


def check_disjoint(source: Path, target: Path) -> None:
    """Refuse to mirror a tree into itself, its parent, or one of its children."""

    source_abs = Path(source).resolve()
    target_abs = Path(target).resolve()
    if source_abs == target_abs:
        raise FilesystemError(f"Source and target are the same directory: {source_abs}")
    if target_abs.is_relative_to(source_abs):
        raise FilesystemError(f"Target {target_abs} lies inside source {source_abs}")
    if source_abs.is_relative_to(target_abs):
        raise FilesystemError(f"Source {source_abs} lies inside target {target_abs}")


def clear_directory(path: Path, preserve: Collection[str] = DEFAULT_PRESERVE) -> list[str]:
    """Remove every direct child of ``path`` except the ``preserve`` names.

    Returns the names that were removed.
    """

    path = Path(path)
    removed: list[str] = []
    try:
        entries = sorted(path.iterdir())
    except OSError as exc:
        raise FilesystemError(f"Cannot list directory {path}: {exc}") from exc

    for entry in entries:
        if entry.name in preserve:
            continue
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        except OSError as exc:
            raise FilesystemError(f"Cannot remove {entry}: {exc}") from exc
        removed.append(entry.name)
    return removed


def list_tree(path: Path, ignore: Collection[str] = DEFAULT_PRESERVE) -> list[str]:
    """Return sorted POSIX paths of the files under ``path``, skipping ``ignore`` names."""

    root = Path(path)
    files: list[str] = []

    def _walk(directory: Path) -> None:
        for entry in directory.iterdir():
            if entry.name in ignore:
                continue
            if entry.is_dir() and not entry.is_symlink():
                _walk(entry)
            else:
                files.append(entry.relative_to(root).as_posix())

    try:
        _walk(root)
    except OSError as exc:
        raise FilesystemError(f"Cannot read directory {root}: {exc}") from exc
    return sorted(files)


def copy_tree(source: Path, target: Path, ignore: Collection[str] = DEFAULT_PRESERVE) -> list[str]:
    """Recursively copy ``source`` over ``target`` and return the copied files."""

    source = Path(source)
    target = Path(target)
    if not source.is_dir():
        raise FilesystemError(f"Source directory does not exist: {source}")

    def _ignored(_directory: str, names: Iterable[str]) -> set[str]:
        return {name for name in names if name in ignore}

    try:
        shutil.copytree(source, target, symlinks=True, ignore=_ignored, dirs_exist_ok=True)
    except OSError as exc:
        raise FilesystemError(f"Cannot copy {source} to {target}: {exc}") from exc
    return list_tree(source, ignore)


__all__ = [
    "DEFAULT_PRESERVE",
    "check_disjoint",
    "clear_directory",
    "copy_tree",
    "ensure_directory",
    "list_tree",
]
