"""Directory walker shared by the manifest builder and the archive writer.

Yields every node under a root directory exactly once, root first, as a
:class:`WalkEntry` carrying the absolute path, the forward-slash relative
path and a file/directory flag.  The generator is lazy and cannot be
restarted; call :func:`walk_entries` again for a fresh pass.
"""
from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from wallet_pass.errors import PassIOError


@dataclass(frozen=True)
class WalkEntry:
    """A single filesystem node found during a walk.

    Attributes
    ----------
    path:
        Absolute path of the node.
    relative:
        Path relative to the walk root using ``/`` separators.  Empty for
        the root itself.
    is_dir:
        True for directories, False for everything else.
    """

    path: Path
    relative: str
    is_dir: bool

    @property
    def is_file(self) -> bool:
        """Return True when the entry is a regular file."""
        return not self.is_dir and self.path.is_file()


def walk_entries(root: Path) -> Iterator[WalkEntry]:
    """Walk *root* top-down and yield one :class:`WalkEntry` per node.

    Sub-directory and file names are visited in sorted order so repeated
    walks of an unchanged tree yield the same sequence.

    Raises
    ------
    PassIOError
        If a directory cannot be listed during the walk.
    """

    def _on_error(exc: OSError) -> None:
        raise PassIOError(f"Cannot walk {exc.filename}: {exc.strerror}") from exc

    yield WalkEntry(path=root, relative="", is_dir=True)

    for dir_str, dir_names, file_names in os.walk(root, onerror=_on_error):
        dir_names.sort()
        current = Path(dir_str)
        for dir_name in dir_names:
            dir_path = current / dir_name
            yield WalkEntry(dir_path, _relative(dir_path, root), True)
        for file_name in sorted(file_names):
            file_path = current / file_name
            yield WalkEntry(file_path, _relative(file_path, root), False)


def _relative(path: Path, root: Path) -> str:
    return path.relative_to(root).as_posix()


__all__ = ["WalkEntry", "walk_entries"]
