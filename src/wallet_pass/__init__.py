"""wallet-pass: build and sign Apple Wallet passes.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import wallet_pass
>>> wallet_pass.__version__
'0.5.0'

Signing a bundle directory
--------------------------
>>> from pathlib import Path
>>> from wallet_pass import sign_path
>>> sign_path(
...     Path("StoreCard.pass"), None,
...     Path("Certificates.p12"), "password",
...     Path("AppleWWDRCAG4.pem"), Path("StoreCard.pkpass"),
... )  # doctest: +SKIP

Editing the descriptor
----------------------
>>> from wallet_pass import Pass, PassField, Details
>>> pass_ = Pass.from_path(Path("StoreCard.pass"))  # doctest: +SKIP
>>> card = Details()
>>> card.add_primary_field(PassField(key="balance", value=13.37, currency_code="EUR"))
"""
from __future__ import annotations

__version__: str = "0.5.0"

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
from wallet_pass.errors import (
    AlreadySignedError,
    ArchiveError,
    CredentialError,
    ExpiredCertificateError,
    InvalidPasswordError,
    KeyMismatchError,
    MalformedCredentialError,
    PassIOError,
    WalletPassError,
)

# ---------------------------------------------------------------------------
# Descriptor
# ---------------------------------------------------------------------------
from wallet_pass.template import (
    Barcode,
    BarcodeFormat,
    Beacon,
    BoardingPass,
    CurrencyAmount,
    DateStyle,
    Details,
    EventType,
    Location,
    Nfc,
    NumberStyle,
    PassField,
    PersonNameComponents,
    Seat,
    Semantics,
    Template,
    TextAlignment,
    TransitType,
)

# ---------------------------------------------------------------------------
# Signing
# ---------------------------------------------------------------------------
from wallet_pass.config import SigningConfig, load_config
from wallet_pass.pkpass import Pass
from wallet_pass.signing import (
    Manifest,
    PipelineStage,
    SigningIdentity,
    SigningPipeline,
    Workspace,
    build_manifest,
    pack_workspace,
    sign_path,
)

__all__ = [
    "__version__",
    # Errors
    "AlreadySignedError",
    "ArchiveError",
    "CredentialError",
    "ExpiredCertificateError",
    "InvalidPasswordError",
    "KeyMismatchError",
    "MalformedCredentialError",
    "PassIOError",
    "WalletPassError",
    # Descriptor
    "Barcode",
    "BarcodeFormat",
    "Beacon",
    "BoardingPass",
    "CurrencyAmount",
    "DateStyle",
    "Details",
    "EventType",
    "Location",
    "Nfc",
    "NumberStyle",
    "PassField",
    "PersonNameComponents",
    "Seat",
    "Semantics",
    "Template",
    "TextAlignment",
    "TransitType",
    # Signing
    "Manifest",
    "Pass",
    "PipelineStage",
    "SigningConfig",
    "SigningIdentity",
    "SigningPipeline",
    "Workspace",
    "build_manifest",
    "load_config",
    "pack_workspace",
    "sign_path",
]
