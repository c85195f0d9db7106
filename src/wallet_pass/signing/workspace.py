"""Disposable signing workspace and bundle pre-flight checks.

The pipeline never writes into the caller's bundle (apart from an explicit
force-clean).  Instead it copies the bundle contents into a uniquely named
temporary directory, injects the descriptor there, and generates the
manifest and signature inside that copy.

Classes
-------
- Workspace   Scoped temporary copy of a bundle (context manager).

Functions
---------
- check_unsigned   Refuse bundles that already hold signing artifacts.
- force_clean      Delete stale signing artifacts from a bundle.
- copy_tree        Copy a directory's contents into another directory.
"""
from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING

from wallet_pass.errors import AlreadySignedError, PassIOError
from wallet_pass.signing.walker import walk_entries

if TYPE_CHECKING:
    from wallet_pass.template import Template

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"
SIGNATURE_FILENAME = "signature"
DESCRIPTOR_FILENAME = "pass.json"

# Signing artifacts that must not be present in an unsigned bundle.
SIGNING_ARTIFACTS: tuple[str, ...] = (MANIFEST_FILENAME, SIGNATURE_FILENAME)

# Filesystem byproducts that are never part of a pass.
METADATA_FILENAMES: frozenset[str] = frozenset({".DS_Store"})

_WORKSPACE_PREFIX = "wallet-pass-"


# ---------------------------------------------------------------------------
# Pre-flight
# ---------------------------------------------------------------------------


def check_unsigned(bundle_path: Path) -> None:
    """Ensure *bundle_path* holds no ``manifest.json`` or ``signature``.

    Raises
    ------
    AlreadySignedError
        If either artifact exists.  The bundle is left untouched.
    """
    found = [name for name in SIGNING_ARTIFACTS if (bundle_path / name).exists()]
    if found:
        raise AlreadySignedError(bundle_path, found)


def force_clean(bundle_path: Path) -> list[str]:
    """Delete ``manifest.json`` and ``signature`` from *bundle_path* in place.

    Returns
    -------
    list[str]
        Names of the artifacts that were removed.

    Raises
    ------
    PassIOError
        If an artifact exists but cannot be removed.
    """
    removed: list[str] = []
    for name in SIGNING_ARTIFACTS:
        artifact = bundle_path / name
        if not artifact.exists():
            continue
        try:
            artifact.unlink()
        except OSError as exc:
            raise PassIOError(f"Cannot remove {artifact}: {exc}") from exc
        removed.append(name)
    if removed:
        logger.info("Force-cleaned %s from %s", ", ".join(removed), bundle_path)
    return removed


def copy_tree(source: Path, destination: Path) -> None:
    """Copy the *contents* of *source* into the existing *destination*.

    The children of *source* become children of *destination*; the name of
    *source* itself is not reproduced.

    Raises
    ------
    PassIOError
        If *source* is not a readable directory or any file fails to copy.
    """
    if not source.is_dir():
        raise PassIOError(f"Pass directory does not exist or is not a directory: {source}")
    try:
        shutil.copytree(source, destination, dirs_exist_ok=True)
    except (OSError, shutil.Error) as exc:
        raise PassIOError(f"Cannot copy {source} to {destination}: {exc}") from exc


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


class Workspace:
    """An exclusively owned temporary copy of a pass bundle.

    Use :meth:`open` to create one.  The instance is a context manager;
    leaving the ``with`` block removes the directory tree.  When the block
    exits through an exception the removal is best-effort and the original
    exception wins.

    Parameters
    ----------
    root:
        The already-created workspace directory.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self._closed = False

    @classmethod
    def open(cls, bundle_path: Path, tmp_dir: Path | None = None) -> "Workspace":
        """Create a workspace and mirror *bundle_path* into it.

        Parameters
        ----------
        bundle_path:
            Source bundle directory.
        tmp_dir:
            Optional base directory for the workspace.  Defaults to the
            system temporary directory.

        Raises
        ------
        PassIOError
            If the directory cannot be created or the copy fails.  A
            partially populated workspace is removed first.
        """
        try:
            root = Path(tempfile.mkdtemp(prefix=_WORKSPACE_PREFIX, dir=tmp_dir))
        except OSError as exc:
            raise PassIOError(f"Cannot create temporary workspace: {exc}") from exc

        workspace = cls(root)
        try:
            copy_tree(bundle_path, root)
        except PassIOError:
            workspace.discard()
            raise
        logger.debug("Copied %s into workspace %s", bundle_path, root)
        return workspace

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_FILENAME

    @property
    def signature_path(self) -> Path:
        return self.root / SIGNATURE_FILENAME

    @property
    def descriptor_path(self) -> Path:
        return self.root / DESCRIPTOR_FILENAME

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def write_descriptor(self, template: Template | None) -> bool:
        """Overwrite ``pass.json`` with the serialised *template*.

        Returns
        -------
        bool
            True if the descriptor was written, False when *template* is
            None and the copied file was left as is.
        """
        if template is None:
            return False
        try:
            self.descriptor_path.write_bytes(template.to_json())
        except OSError as exc:
            raise PassIOError(f"Cannot write {self.descriptor_path}: {exc}") from exc
        logger.debug("Injected descriptor into %s", self.descriptor_path)
        return True

    def remove_metadata_files(self) -> list[str]:
        """Delete ``.DS_Store`` files anywhere in the workspace.

        Returns
        -------
        list[str]
            Relative paths of the removed files.
        """
        targets = [
            entry
            for entry in walk_entries(self.root)
            if not entry.is_dir and entry.path.name in METADATA_FILENAMES
        ]
        removed: list[str] = []
        for entry in targets:
            try:
                entry.path.unlink()
            except OSError as exc:
                raise PassIOError(f"Cannot remove {entry.path}: {exc}") from exc
            removed.append(entry.relative)
        return removed

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Remove the workspace directory tree.

        Raises
        ------
        PassIOError
            If the tree cannot be removed.
        """
        if self._closed:
            return
        try:
            shutil.rmtree(self.root)
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise PassIOError(f"Cannot remove workspace {self.root}: {exc}") from exc
        self._closed = True
        logger.debug("Removed workspace %s", self.root)

    def discard(self) -> None:
        """Best-effort :meth:`close` that logs instead of raising."""
        try:
            self.close()
        except PassIOError as exc:
            logger.warning("Workspace cleanup failed: %s", exc)

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.close()
        else:
            self.discard()

    def __repr__(self) -> str:
        return f"Workspace(root={str(self.root)!r}, closed={self._closed})"


__all__ = [
    "DESCRIPTOR_FILENAME",
    "MANIFEST_FILENAME",
    "SIGNATURE_FILENAME",
    "SIGNING_ARTIFACTS",
    "Workspace",
    "check_unsigned",
    "copy_tree",
    "force_clean",
]
