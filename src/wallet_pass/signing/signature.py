"""Detached PKCS#7 signing of the pass manifest.

A pass is signed with a Pass Type ID identity, delivered as a
password-protected PKCS#12 container, chained to the Apple WWDR
intermediate certificate (PEM).  The signature is a DER-encoded PKCS#7
SignedData structure that embeds both certificates but not the manifest
itself (detached mode); ``manifest.json`` travels next to it in the
archive.

Classes
-------
- SigningIdentity   Decoded private key, signing certificate and intermediate.

Functions
---------
- sign_manifest     Sign ``manifest.json`` in a workspace and write ``signature``.
"""
from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import pkcs7, pkcs12

from wallet_pass.errors import (
    ExpiredCertificateError,
    InvalidPasswordError,
    KeyMismatchError,
    MalformedCredentialError,
    PassIOError,
)
from wallet_pass.signing.workspace import SIGNATURE_FILENAME

logger = logging.getLogger(__name__)

IDENTITY = "identity"
INTERMEDIATE = "intermediate"

# DER encodings of PKCS#12 and X.509 both start with a SEQUENCE tag.
_ASN1_SEQUENCE = 0x30

_SIGNING_OPTIONS = [
    pkcs7.PKCS7Options.DetachedSignature,
    pkcs7.PKCS7Options.Binary,
]


@dataclass(frozen=True)
class SigningIdentity:
    """Credential material needed to sign a manifest.

    Attributes
    ----------
    private_key:
        The identity's RSA or EC private key.
    certificate:
        The signing (Pass Type ID) certificate.
    intermediate:
        The intermediate authority certificate completing the chain.
    """

    private_key: rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey
    certificate: x509.Certificate
    intermediate: x509.Certificate

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def load(
        cls,
        identity_path: Path,
        password: str,
        intermediate_path: Path,
        at: datetime.datetime | None = None,
    ) -> "SigningIdentity":
        """Read, decode and check credential files.

        Parameters
        ----------
        identity_path:
            PKCS#12 container with the private key and signing certificate.
        password:
            Password of the container.  An empty string means no password.
        intermediate_path:
            PEM file holding the intermediate certificate.
        at:
            Instant at which both certificates must be valid.  Defaults to
            now (UTC).

        Raises
        ------
        PassIOError
            If a credential file cannot be read.
        CredentialError
            If the material is unusable; the subclass names the problem and
            ``source`` names the faulty input.
        """
        identity_data = _read_bytes(identity_path)
        intermediate_data = _read_bytes(intermediate_path)
        return cls.from_bytes(identity_data, password, intermediate_data, at=at)

    @classmethod
    def from_bytes(
        cls,
        identity_data: bytes,
        password: str,
        intermediate_data: bytes,
        at: datetime.datetime | None = None,
    ) -> "SigningIdentity":
        """Decode credential material already held in memory.

        See :meth:`load` for parameters and errors.
        """
        private_key, certificate = _decode_identity(identity_data, password)
        intermediate = _decode_intermediate(intermediate_data)

        identity = cls(
            private_key=private_key,
            certificate=certificate,
            intermediate=intermediate,
        )
        identity.check(at=at)
        return identity

    def check(self, at: datetime.datetime | None = None) -> None:
        """Verify key/certificate pairing and certificate validity.

        Raises
        ------
        KeyMismatchError
            If the certificate's public key is not the private key's.
        ExpiredCertificateError
            If either certificate is outside its validity window at *at*.
        """
        if _public_bytes(self.certificate.public_key()) != _public_bytes(
            self.private_key.public_key()
        ):
            raise KeyMismatchError(
                IDENTITY,
                "private key does not match certificate "
                f"{self.certificate.subject.rfc4514_string()}",
            )

        instant = at or datetime.datetime.now(datetime.timezone.utc)
        _check_validity(IDENTITY, self.certificate, instant)
        _check_validity(INTERMEDIATE, self.intermediate, instant)

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def sign(self, manifest_bytes: bytes) -> bytes:
        """Return a DER-encoded detached PKCS#7 signature over *manifest_bytes*.

        The structure embeds the signing certificate and the intermediate
        but not the signed content.
        """
        return (
            pkcs7.PKCS7SignatureBuilder()
            .set_data(manifest_bytes)
            .add_signer(self.certificate, self.private_key, hashes.SHA256())
            .add_certificate(self.intermediate)
            .sign(serialization.Encoding.DER, _SIGNING_OPTIONS)
        )


def sign_manifest(identity: SigningIdentity, manifest_path: Path) -> Path:
    """Sign the bytes of *manifest_path* and write ``signature`` beside it.

    The manifest is read back from disk so the signature covers exactly the
    bytes that will be archived.

    Returns
    -------
    Path
        Path of the written signature file.

    Raises
    ------
    PassIOError
        If the manifest cannot be read or the signature cannot be written.
    """
    manifest_bytes = _read_bytes(manifest_path)
    signature = identity.sign(manifest_bytes)

    signature_path = manifest_path.parent / SIGNATURE_FILENAME
    try:
        signature_path.write_bytes(signature)
    except OSError as exc:
        raise PassIOError(f"Cannot write {signature_path}: {exc}") from exc
    logger.debug(
        "Signed %s (%d bytes) as %s",
        manifest_path.name,
        len(manifest_bytes),
        identity.certificate.subject.rfc4514_string(),
    )
    return signature_path


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise PassIOError(f"Cannot read {path}: {exc}") from exc


def _decode_identity(
    data: bytes, password: str
) -> tuple[rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey, x509.Certificate]:
    """Decode a PKCS#12 container into its key and certificate."""
    if not data or data[0] != _ASN1_SEQUENCE:
        raise MalformedCredentialError(IDENTITY, "not a PKCS#12 container")

    password_bytes = password.encode("utf-8") if password else None
    try:
        private_key, certificate, _additional = pkcs12.load_key_and_certificates(
            data, password_bytes
        )
    except ValueError as exc:
        raise InvalidPasswordError(
            IDENTITY,
            "cannot decrypt PKCS#12 container (wrong password, or the container "
            f"is truncated or corrupt): {exc}",
        ) from exc

    if private_key is None:
        raise MalformedCredentialError(IDENTITY, "PKCS#12 container holds no private key")
    if certificate is None:
        raise MalformedCredentialError(IDENTITY, "PKCS#12 container holds no certificate")
    if not isinstance(private_key, (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey)):
        raise MalformedCredentialError(
            IDENTITY,
            f"unsupported private key type {type(private_key).__name__} "
            "(expected RSA or EC)",
        )
    return private_key, certificate


def _decode_intermediate(data: bytes) -> x509.Certificate:
    try:
        return x509.load_pem_x509_certificate(data)
    except ValueError as exc:
        raise MalformedCredentialError(
            INTERMEDIATE, f"cannot parse PEM certificate: {exc}"
        ) from exc


def _check_validity(
    source: str, certificate: x509.Certificate, instant: datetime.datetime
) -> None:
    not_before = certificate.not_valid_before_utc
    not_after = certificate.not_valid_after_utc
    if instant < not_before:
        raise ExpiredCertificateError(
            source, f"certificate is not valid before {not_before.isoformat()}"
        )
    if instant > not_after:
        raise ExpiredCertificateError(
            source, f"certificate expired on {not_after.isoformat()}"
        )


def _public_bytes(public_key: object) -> bytes:
    return public_key.public_bytes(  # type: ignore[attr-defined]
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )


__all__ = ["SigningIdentity", "sign_manifest"]
