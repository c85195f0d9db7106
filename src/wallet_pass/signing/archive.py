"""Archive writer: streams a finished workspace into a ``.pkpass`` ZIP.

Every node found by the walker becomes an entry.  Files are Deflate
compressed; directories are written as explicit ``name/`` entries because
some unzip tools do not recreate parent directories from file paths.  The
workspace root itself is never written, which would otherwise produce an
empty entry name and extraction warnings.
"""
from __future__ import annotations

import logging
import os
import shutil
import stat
import zipfile
from pathlib import Path
from typing import BinaryIO, Union

from wallet_pass.errors import ArchiveError, PassIOError
from wallet_pass.signing.walker import WalkEntry, walk_entries

logger = logging.getLogger(__name__)

ArchiveSink = Union[str, "os.PathLike[str]", BinaryIO]

# Fixed rwxr-xr-x permission bits stored for every entry.
ENTRY_PERMISSIONS = 0o755

# MS-DOS directory attribute in the low byte of external_attr.
_DOS_DIRECTORY = 0x10


def pack_workspace(root: Path, sink: ArchiveSink) -> ArchiveSink:
    """Write every node under *root* into a ZIP archive on *sink*.

    Parameters
    ----------
    root:
        Finished workspace directory.
    sink:
        Output path or a writable, seekable binary stream.

    Returns
    -------
    ArchiveSink
        The *sink* that was passed in, positioned after the archive when it
        is a stream.

    Raises
    ------
    ArchiveError
        If *root* is missing or not a directory.
    PassIOError
        If reading a workspace file or writing the archive fails.
    """
    if not root.is_dir():
        raise ArchiveError(f"Workspace to pack is missing or not a directory: {root}")

    count = 0
    try:
        with zipfile.ZipFile(sink, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
            for entry in walk_entries(root):
                if entry.is_dir:
                    # Root has an empty relative path and is skipped.
                    if not entry.relative:
                        continue
                    _write_directory(archive, entry)
                else:
                    _write_file(archive, entry)
                count += 1
    except PassIOError:
        raise
    except OSError as exc:
        raise PassIOError(f"Cannot write archive from {root}: {exc}") from exc

    logger.debug("Packed %d entries from %s", count, root)
    return sink


def _write_file(archive: zipfile.ZipFile, entry: WalkEntry) -> None:
    info = zipfile.ZipInfo.from_file(entry.path, arcname=entry.relative)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = (stat.S_IFREG | ENTRY_PERMISSIONS) << 16
    with entry.path.open("rb") as src, archive.open(info, mode="w") as dst:
        shutil.copyfileobj(src, dst)


def _write_directory(archive: zipfile.ZipFile, entry: WalkEntry) -> None:
    info = zipfile.ZipInfo.from_file(entry.path, arcname=entry.relative)
    info.compress_type = zipfile.ZIP_STORED
    info.external_attr = ((stat.S_IFDIR | ENTRY_PERMISSIONS) << 16) | _DOS_DIRECTORY
    archive.writestr(info, b"")


__all__ = ["ENTRY_PERMISSIONS", "ArchiveSink", "pack_workspace"]
