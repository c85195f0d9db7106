"""Signing and packaging pipeline for pass bundles."""
from __future__ import annotations

from wallet_pass.signing.archive import pack_workspace
from wallet_pass.signing.manifest import Manifest, build_manifest
from wallet_pass.signing.pipeline import PipelineStage, SigningPipeline, sign_path
from wallet_pass.signing.signature import SigningIdentity, sign_manifest
from wallet_pass.signing.walker import WalkEntry, walk_entries
from wallet_pass.signing.workspace import (
    DESCRIPTOR_FILENAME,
    MANIFEST_FILENAME,
    SIGNATURE_FILENAME,
    Workspace,
    check_unsigned,
    force_clean,
)

__all__ = [
    "DESCRIPTOR_FILENAME",
    "MANIFEST_FILENAME",
    "SIGNATURE_FILENAME",
    "Manifest",
    "PipelineStage",
    "SigningIdentity",
    "SigningPipeline",
    "WalkEntry",
    "Workspace",
    "build_manifest",
    "check_unsigned",
    "force_clean",
    "pack_workspace",
    "sign_manifest",
    "sign_path",
    "walk_entries",
]
