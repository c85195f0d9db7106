"""Shared fixtures: a throwaway PKI, credential files and a sample pass bundle."""
from __future__ import annotations

import datetime
import json
import os
import shutil
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

IDENTITY_PASSWORD = "s3cret"

PASS_JSON: dict[str, object] = {
    "description": "Store card",
    "formatVersion": 1,
    "organizationName": "Example Store",
    "passTypeIdentifier": "pass.com.example.store",
    "serialNumber": "0001",
    "teamIdentifier": "ASDF1234AS",
    "storeCard": {
        "primaryFields": [{"key": "balance", "label": "balance", "value": 13.37}],
    },
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _name(common_name: str) -> x509.Name:
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])


def issue_certificate(
    subject_cn: str,
    subject_key: ec.EllipticCurvePrivateKey,
    issuer_cn: str,
    issuer_key: ec.EllipticCurvePrivateKey,
    ca: bool,
    not_before: datetime.datetime | None = None,
    not_after: datetime.datetime | None = None,
) -> x509.Certificate:
    """Issue an X.509 certificate for *subject_key* signed by *issuer_key*."""
    not_before = not_before or _now() - datetime.timedelta(days=1)
    not_after = not_after or _now() + datetime.timedelta(days=30)
    key_usage = x509.KeyUsage(
        digital_signature=not ca,
        content_commitment=False,
        key_encipherment=False,
        data_encipherment=False,
        key_agreement=False,
        key_cert_sign=ca,
        crl_sign=ca,
        encipher_only=False,
        decipher_only=False,
    )
    return (
        x509.CertificateBuilder()
        .subject_name(_name(subject_cn))
        .issuer_name(_name(issuer_cn))
        .public_key(subject_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .add_extension(key_usage, critical=True)
        .add_extension(
            x509.SubjectKeyIdentifier.from_public_key(subject_key.public_key()),
            critical=False,
        )
        .add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer_key.public_key()),
            critical=False,
        )
        .sign(issuer_key, hashes.SHA256())
    )


def new_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


def write_identity(
    path: Path,
    key: ec.EllipticCurvePrivateKey,
    certificate: x509.Certificate,
    password: str = IDENTITY_PASSWORD,
) -> Path:
    """Write *key* and *certificate* as a password-protected PKCS#12 file."""
    path.write_bytes(
        pkcs12.serialize_key_and_certificates(
            b"pass-type-id",
            key,
            certificate,
            None,
            serialization.BestAvailableEncryption(password.encode("utf-8")),
        )
    )
    return path


def write_pem(path: Path, certificate: x509.Certificate) -> Path:
    path.write_bytes(certificate.public_bytes(serialization.Encoding.PEM))
    return path


# ---------------------------------------------------------------------------
# PKI
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Pki:
    root_key: ec.EllipticCurvePrivateKey
    root: x509.Certificate
    intermediate_key: ec.EllipticCurvePrivateKey
    intermediate: x509.Certificate
    leaf_key: ec.EllipticCurvePrivateKey
    leaf: x509.Certificate


@dataclass(frozen=True)
class Credentials:
    identity_path: Path
    password: str
    intermediate_path: Path
    root_path: Path


@pytest.fixture(scope="session")
def pki() -> Pki:
    root_key = new_key()
    root = issue_certificate("Test Root CA", root_key, "Test Root CA", root_key, ca=True)
    intermediate_key = new_key()
    intermediate = issue_certificate(
        "Test WWDR Intermediate", intermediate_key, "Test Root CA", root_key, ca=True
    )
    leaf_key = new_key()
    leaf = issue_certificate(
        "Pass Type ID: pass.com.example.store",
        leaf_key,
        "Test WWDR Intermediate",
        intermediate_key,
        ca=False,
    )
    return Pki(root_key, root, intermediate_key, intermediate, leaf_key, leaf)


@pytest.fixture()
def credentials(tmp_path: Path, pki: Pki) -> Credentials:
    cert_dir = tmp_path / "certs"
    cert_dir.mkdir()
    return Credentials(
        identity_path=write_identity(cert_dir / "identity.p12", pki.leaf_key, pki.leaf),
        password=IDENTITY_PASSWORD,
        intermediate_path=write_pem(cert_dir / "wwdr.pem", pki.intermediate),
        root_path=write_pem(cert_dir / "root.pem", pki.root),
    )


# ---------------------------------------------------------------------------
# Bundles and workspaces
# ---------------------------------------------------------------------------


@pytest.fixture()
def bundle(tmp_path: Path) -> Path:
    """A pass directory with a descriptor, images and a localisation folder."""
    root = tmp_path / "StoreCard.pass"
    files = {
        "pass.json": json.dumps(PASS_JSON, indent=2).encode("utf-8"),
        "icon.png": b"\x89PNG\r\n\x1a\nicon",
        "logo.png": b"\x89PNG\r\n\x1a\nlogo",
        "images/strip.png": b"\x89PNG\r\n\x1a\nstrip",
        "en.lproj/pass.strings": b'"balance" = "Balance";\n',
        "de.lproj/pass.strings": b'"balance" = "Guthaben";\n',
    }
    for rel_path, content in files.items():
        file_path = root / rel_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(content)
    return root


@pytest.fixture()
def workspace_tmp(tmp_path: Path) -> Path:
    """Base directory for signing workspaces, so leftovers are observable."""
    base = tmp_path / "workspaces"
    base.mkdir()
    return base


# ---------------------------------------------------------------------------
# Signature verification
# ---------------------------------------------------------------------------


@pytest.fixture()
def openssl_verify(tmp_path: Path) -> Callable[[bytes, bytes, Path], bool]:
    """Return a callable verifying a detached DER signature with ``openssl cms``.

    Skips when the ``openssl`` binary is missing.  Under CI (``$CI`` set)
    the binary is required and a missing one fails the test.
    """
    openssl = shutil.which("openssl")
    if openssl is None:
        if os.environ.get("CI"):
            pytest.fail("openssl binary is required to verify signatures in CI")
        pytest.skip("openssl binary not available")

    def _verify(signature: bytes, content: bytes, root_path: Path) -> bool:
        signature_path = tmp_path / "verify-signature.der"
        content_path = tmp_path / "verify-content.json"
        signature_path.write_bytes(signature)
        content_path.write_bytes(content)
        result = subprocess.run(
            [
                openssl, "cms", "-verify",
                "-binary",
                "-inform", "DER",
                "-in", str(signature_path),
                "-content", str(content_path),
                "-CAfile", str(root_path),
                "-purpose", "any",
                "-out", str(tmp_path / "verify-out.bin"),
            ],
            capture_output=True,
            check=False,
        )
        return result.returncode == 0

    return _verify


# ---------------------------------------------------------------------------
# Factories exposed to test modules
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def make_key() -> Callable[[], ec.EllipticCurvePrivateKey]:
    return new_key


@pytest.fixture(scope="session")
def make_certificate() -> Callable[..., x509.Certificate]:
    return issue_certificate


@pytest.fixture(scope="session")
def make_identity() -> Callable[..., Path]:
    return write_identity


@pytest.fixture(scope="session")
def make_pem() -> Callable[[Path, x509.Certificate], Path]:
    return write_pem
