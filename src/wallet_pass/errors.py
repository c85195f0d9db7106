"""Exception hierarchy for wallet-pass.

Every failure surfaced by the signing pipeline derives from
:class:`WalletPassError`, so callers can catch a single type.

Classes
-------
- WalletPassError           Base class for all library errors.
- AlreadySignedError        Bundle already holds signing artifacts.
- PassIOError               Read / write / copy / remove failure.
- CredentialError           Identity or intermediate certificate is unusable.
- InvalidPasswordError      PKCS#12 container could not be decrypted.
- MalformedCredentialError  Container or certificate could not be parsed.
- ExpiredCertificateError   Certificate outside its validity window.
- KeyMismatchError          Private key does not belong to the certificate.
- ArchiveError              Packing target missing or not a directory.
"""
from __future__ import annotations

from pathlib import Path


class WalletPassError(Exception):
    """Base class for every error raised by wallet-pass."""


class AlreadySignedError(WalletPassError):
    """Raised when a bundle still contains ``manifest.json`` or ``signature``.

    Attributes
    ----------
    bundle_path:
        The bundle directory that was inspected.
    artifacts:
        Names of the signing artifacts that were found.
    """

    def __init__(self, bundle_path: Path, artifacts: list[str]) -> None:
        self.bundle_path = bundle_path
        self.artifacts = artifacts
        super().__init__(
            f"{bundle_path} contains pass signing artifacts that need to be "
            f"removed before signing: {', '.join(artifacts)} "
            "(use force to remove them)"
        )


class PassIOError(WalletPassError, OSError):
    """Raised when a filesystem operation of the pipeline fails."""


class CredentialError(WalletPassError):
    """Raised when caller-supplied credential material cannot be used.

    Attributes
    ----------
    source:
        Which input was at fault: ``"identity"`` or ``"intermediate"``.
    """

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"{source}: {message}")


class InvalidPasswordError(CredentialError):
    """The identity container could not be decrypted with the password."""


class MalformedCredentialError(CredentialError):
    """A container or certificate is unparseable or incomplete."""


class ExpiredCertificateError(CredentialError):
    """A certificate is not valid at signing time."""


class KeyMismatchError(CredentialError):
    """The identity's private key does not match its certificate."""


class ArchiveError(WalletPassError):
    """Raised when the archive cannot be assembled."""


__all__ = [
    "AlreadySignedError",
    "ArchiveError",
    "CredentialError",
    "ExpiredCertificateError",
    "InvalidPasswordError",
    "KeyMismatchError",
    "MalformedCredentialError",
    "PassIOError",
    "WalletPassError",
]
