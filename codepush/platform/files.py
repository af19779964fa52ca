"""Filesystem helpers for the release scratch area.

Everything a release creates on disk (signed copies, the zip archive) lives
under one scratch directory, which is removed with a single `remove_dir`
call when the command finishes.
"""

from __future__ import annotations

import os
import shutil
import stat
import tempfile
from collections.abc import Callable
from pathlib import Path
from types import TracebackType

__all__ = ["ScratchDir", "copy_tree", "remove_dir"]


def _remove_readonly(_func: Callable[[str], object], path: str, exc: BaseException) -> None:
    """Handle read-only files on Windows (e.g. copied from a git checkout)."""
    if isinstance(exc, PermissionError):
        os.chmod(path, stat.S_IWRITE)
        os.unlink(path)
    else:
        raise exc


def remove_dir(path: Path) -> None:
    """Recursively remove a directory; a missing directory is not an error."""
    if not path.exists():
        return
    shutil.rmtree(path, onexc=_remove_readonly)


def copy_tree(src: Path, dest: Path) -> None:
    """Copy a file or a directory's contents into dest (created if needed)."""
    dest.mkdir(parents=True, exist_ok=True)
    if src.is_dir():
        shutil.copytree(src, dest, dirs_exist_ok=True)
    else:
        shutil.copy2(src, dest / src.name)


class ScratchDir:
    """Temporary directory owned by one command invocation.

    Usage:
        with ScratchDir() as scratch:
            archive = scratch.path / "release.zip"
            ...
        # removed here, whatever happened inside the block
    """

    def __init__(self, prefix: str = "codepush-") -> None:
        self._prefix = prefix
        self._path: Path | None = None

    @property
    def path(self) -> Path:
        if self._path is None:
            raise RuntimeError("scratch directory is not open")
        return self._path

    def __enter__(self) -> ScratchDir:
        self._path = Path(tempfile.mkdtemp(prefix=self._prefix))
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        path, self._path = self._path, None
        if path is not None:
            remove_dir(path)
