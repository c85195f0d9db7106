"""Pass manifest: a SHA-1 digest for every file in the workspace.

The manifest maps each file's forward-slash relative path to the
lowercase hex SHA-1 of its bytes.  It is written to ``manifest.json`` at
the workspace root and is what the detached signature covers, so it must
be built before ``manifest.json`` and ``signature`` exist.

Classes
-------
- Manifest   Path -> digest mapping with JSON serialisation.

Functions
---------
- build_manifest   Walk a workspace and digest every regular file.
- sha1_file        Stream a file through SHA-1.
"""
from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from wallet_pass.errors import PassIOError
from wallet_pass.signing.walker import walk_entries
from wallet_pass.signing.workspace import MANIFEST_FILENAME

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 65_536


@dataclass
class Manifest:
    """Digest manifest of a pass workspace.

    Attributes
    ----------
    entries:
        Relative path (``/`` separated) to lowercase hex SHA-1 digest.
    """

    entries: dict[str, str] = field(default_factory=dict)

    def add(self, relative_path: str, digest: str) -> None:
        """Record *digest* for *relative_path*.

        Raises
        ------
        ValueError
            If the path is empty or already present.
        """
        if not relative_path:
            raise ValueError("manifest path must not be empty")
        if relative_path in self.entries:
            raise ValueError(f"duplicate manifest path: {relative_path!r}")
        self.entries[relative_path] = digest

    def __contains__(self, relative_path: object) -> bool:
        return relative_path in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def to_json_bytes(self) -> bytes:
        """Serialise to pretty-printed UTF-8 JSON with sorted keys."""
        return json.dumps(self.entries, indent=2, sort_keys=True, ensure_ascii=False).encode(
            "utf-8"
        )

    @classmethod
    def from_json_bytes(cls, data: bytes | str) -> "Manifest":
        """Parse a manifest previously produced by :meth:`to_json_bytes`."""
        raw = json.loads(data)
        if not isinstance(raw, dict):
            raise ValueError("manifest JSON must be an object")
        return cls(entries={str(k): str(v) for k, v in raw.items()})

    def write(self, root: Path) -> Path:
        """Write ``manifest.json`` into *root* and return its path.

        Raises
        ------
        PassIOError
            If the file cannot be written.
        """
        manifest_path = root / MANIFEST_FILENAME
        try:
            manifest_path.write_bytes(self.to_json_bytes())
        except OSError as exc:
            raise PassIOError(f"Cannot write {manifest_path}: {exc}") from exc
        return manifest_path


def sha1_file(file_path: Path) -> str:
    """Return the lowercase hex SHA-1 digest of *file_path*.

    Reads in 64 KiB chunks.

    Raises
    ------
    PassIOError
        If the file cannot be read.
    """
    hasher = hashlib.sha1()
    try:
        with file_path.open("rb") as fh:
            while True:
                chunk = fh.read(_CHUNK_SIZE)
                if not chunk:
                    break
                hasher.update(chunk)
    except OSError as exc:
        raise PassIOError(f"Cannot read {file_path}: {exc}") from exc
    return hasher.hexdigest()


def build_manifest(root: Path) -> Manifest:
    """Digest every regular file under *root*.

    Directories are walked but never recorded.  Keys are the full relative
    path, so same-named files in different sub-directories stay distinct.

    Raises
    ------
    PassIOError
        If the walk or any read fails.
    """
    manifest = Manifest()
    for entry in walk_entries(root):
        if not entry.is_file:
            continue
        manifest.add(entry.relative, sha1_file(entry.path))
    logger.debug("Built manifest with %d entries for %s", len(manifest), root)
    return manifest


__all__ = ["Manifest", "build_manifest", "sha1_file"]
