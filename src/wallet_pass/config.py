"""Signing configuration loaded from YAML.

A config file keeps credential locations out of shell history::

    certificate_path: certs/pass.p12
    certificate_password: secret
    intermediate_certificate_path: certs/AppleWWDRCAG4.pem
    force: false
    tmp_dir: /var/tmp

Relative paths are resolved against the directory of the config file.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path

import yaml

from wallet_pass.errors import PassIOError

_PATH_KEYS: frozenset[str] = frozenset(
    {"certificate_path", "intermediate_certificate_path", "tmp_dir"}
)


@dataclass(frozen=True)
class SigningConfig:
    """Options for signing a pass.

    Attributes
    ----------
    certificate_path:
        PKCS#12 identity file.
    certificate_password:
        Password of the identity file.
    intermediate_certificate_path:
        PEM intermediate (WWDR) certificate.
    force:
        Remove stale ``manifest.json`` / ``signature`` from the bundle.
    tmp_dir:
        Base directory for signing workspaces.
    """

    certificate_path: Path | None = None
    certificate_password: str | None = None
    intermediate_certificate_path: Path | None = None
    force: bool = False
    tmp_dir: Path | None = None

    def merge(self, **overrides: object) -> "SigningConfig":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return dataclasses.replace(self, **changes)  # type: ignore[arg-type]

    def missing(self) -> list[str]:
        """Return the names of required settings that are unset."""
        required = ("certificate_path", "certificate_password", "intermediate_certificate_path")
        return [name for name in required if getattr(self, name) is None]


def load_config(path: Path) -> SigningConfig:
    """Read a :class:`SigningConfig` from a YAML file.

    Raises
    ------
    PassIOError
        If the file cannot be read.
    ValueError
        If the document is not a YAML mapping or holds unknown keys.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PassIOError(f"Cannot read config file {path}: {exc}") from exc

    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Config file {path} is not valid YAML: {exc}") from exc
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping.")

    known = {f.name for f in dataclasses.fields(SigningConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {', '.join(unknown)}")

    values: dict[str, object] = {}
    for key, value in raw.items():
        if value is None:
            continue
        if key in _PATH_KEYS:
            value = path.parent / Path(str(value)).expanduser()
        elif key == "certificate_password":
            value = str(value)
        elif key == "force":
            value = bool(value)
        values[key] = value
    return SigningConfig(**values)  # type: ignore[arg-type]


__all__ = ["SigningConfig", "load_config"]
