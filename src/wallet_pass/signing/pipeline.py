"""Signing pipeline: bundle directory in, signed ``.pkpass`` archive out.

Stages run strictly in order and hand over through files in the
workspace, never through in-memory copies, so the signature covers the
exact ``manifest.json`` bytes that end up in the archive::

    START -> (FORCE_CLEAN) -> VALIDATED -> WORKSPACE_READY
          -> DESCRIPTOR_INJECTED -> MANIFEST_BUILT -> SIGNED -> PACKED
          -> CLEANED_UP -> DONE

Any failure moves the pipeline to FAILED.  The workspace is removed on
every path; a cleanup failure is only reported when nothing else failed.

Classes
-------
- PipelineStage    Enum of pipeline states.
- SigningPipeline  Reusable pipeline bound to one set of credentials.

Functions
---------
- sign_path        One-shot functional entry point.
"""
from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from wallet_pass.signing.archive import ArchiveSink, pack_workspace
from wallet_pass.signing.manifest import build_manifest
from wallet_pass.signing.signature import SigningIdentity, sign_manifest
from wallet_pass.signing.workspace import Workspace, check_unsigned, force_clean

if TYPE_CHECKING:
    from wallet_pass.template import Template

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    """State of a :class:`SigningPipeline` run."""

    START = "start"
    FORCE_CLEAN = "force_clean"
    VALIDATED = "validated"
    WORKSPACE_READY = "workspace_ready"
    DESCRIPTOR_INJECTED = "descriptor_injected"
    MANIFEST_BUILT = "manifest_built"
    SIGNED = "signed"
    PACKED = "packed"
    CLEANED_UP = "cleaned_up"
    DONE = "done"
    FAILED = "failed"


class SigningPipeline:
    """Signs pass bundles with one identity and intermediate certificate.

    The instance holds no per-run state besides :attr:`stage`; use one
    instance per thread when signing concurrently.

    Parameters
    ----------
    certificate_path:
        PKCS#12 identity (private key and Pass Type ID certificate).
    certificate_password:
        Password of the PKCS#12 container.
    intermediate_path:
        PEM intermediate (WWDR) certificate.
    force:
        Delete ``manifest.json`` / ``signature`` from the source bundle
        instead of refusing to sign it.
    tmp_dir:
        Base directory for workspaces.  Defaults to the system temp dir.
    """

    def __init__(
        self,
        certificate_path: Path,
        certificate_password: str,
        intermediate_path: Path,
        force: bool = False,
        tmp_dir: Path | None = None,
    ) -> None:
        self._certificate_path = Path(certificate_path)
        self._certificate_password = certificate_password
        self._intermediate_path = Path(intermediate_path)
        self._force = force
        self._tmp_dir = Path(tmp_dir) if tmp_dir is not None else None
        self._stage = PipelineStage.START

    @property
    def stage(self) -> PipelineStage:
        """The state reached by the most recent run."""
        return self._stage

    def run(
        self,
        pass_path: Path,
        output: ArchiveSink,
        template: Template | None = None,
    ) -> ArchiveSink:
        """Sign *pass_path* and write the archive to *output*.

        Parameters
        ----------
        pass_path:
            Bundle directory holding ``pass.json`` and resources.
        output:
            Archive path, or a writable and seekable binary stream.  A path
            is only created once signing succeeded.
        template:
            Optional descriptor that replaces the bundle's ``pass.json``.

        Returns
        -------
        ArchiveSink
            *output*.

        Raises
        ------
        WalletPassError
            The first error of the run; see :mod:`wallet_pass.errors`.
        """
        bundle = Path(pass_path)
        self._advance(PipelineStage.START)
        try:
            if self._force:
                force_clean(bundle)
                self._advance(PipelineStage.FORCE_CLEAN)

            check_unsigned(bundle)
            self._advance(PipelineStage.VALIDATED)

            with Workspace.open(bundle, tmp_dir=self._tmp_dir) as workspace:
                self._advance(PipelineStage.WORKSPACE_READY)

                workspace.write_descriptor(template)
                removed = workspace.remove_metadata_files()
                if removed:
                    logger.debug("Removed metadata files: %s", ", ".join(removed))
                self._advance(PipelineStage.DESCRIPTOR_INJECTED)

                manifest = build_manifest(workspace.root)
                manifest_path = manifest.write(workspace.root)
                self._advance(PipelineStage.MANIFEST_BUILT)

                identity = SigningIdentity.load(
                    self._certificate_path,
                    self._certificate_password,
                    self._intermediate_path,
                )
                sign_manifest(identity, manifest_path)
                self._advance(PipelineStage.SIGNED)

                _pack(workspace.root, output)
                self._advance(PipelineStage.PACKED)
            self._advance(PipelineStage.CLEANED_UP)
        except Exception:
            logger.debug("Pipeline failed after stage %s", self._stage.value)
            self._stage = PipelineStage.FAILED
            raise

        self._advance(PipelineStage.DONE)
        logger.info("Signed pass %s (%d manifest entries)", bundle, len(manifest))
        return output

    def _advance(self, stage: PipelineStage) -> None:
        self._stage = stage
        logger.debug("Pipeline stage: %s", stage.value)


def sign_path(
    pass_path: Path,
    template: Template | None,
    certificate_path: Path,
    certificate_password: str,
    intermediate_path: Path,
    output: ArchiveSink,
    force: bool = False,
    tmp_dir: Path | None = None,
) -> ArchiveSink:
    """Sign the bundle at *pass_path* and write the archive to *output*.

    Convenience wrapper around :class:`SigningPipeline`; see
    :meth:`SigningPipeline.run` for details.
    """
    pipeline = SigningPipeline(
        certificate_path=certificate_path,
        certificate_password=certificate_password,
        intermediate_path=intermediate_path,
        force=force,
        tmp_dir=tmp_dir,
    )
    return pipeline.run(pass_path, output, template=template)


def _pack(root: Path, output: ArchiveSink) -> ArchiveSink:
    """Pack into *output*, removing a half-written archive file on failure."""
    if not isinstance(output, (str, os.PathLike)):
        return pack_workspace(root, output)

    output_path = Path(output)
    try:
        pack_workspace(root, output_path)
    except Exception:
        try:
            output_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Cannot remove partial archive %s: %s", output_path, exc)
        raise
    return output


__all__ = ["PipelineStage", "SigningPipeline", "sign_path"]
