"""A pass bundle directory paired with its descriptor.

Load a bundle, edit the descriptor in memory, then export a signed
``.pkpass``; the edited descriptor replaces ``pass.json`` in the signing
workspace while the bundle on disk stays untouched::

    pass_ = Pass.from_path(Path("StoreCard.pass"))
    pass_.template.serial_number = "1234567890"
    pass_.export_to_file(
        Path("Certificates.p12"),
        "password",
        Path("AppleWWDRCAG4.pem"),
        Path("StoreCard.pkpass"),
    )
"""
from __future__ import annotations

from pathlib import Path

from wallet_pass.errors import PassIOError
from wallet_pass.signing.archive import ArchiveSink
from wallet_pass.signing.pipeline import sign_path
from wallet_pass.signing.workspace import DESCRIPTOR_FILENAME
from wallet_pass.template import Template


class Pass:
    """A bundle directory with images and resources plus a :class:`Template`.

    Parameters
    ----------
    pass_path:
        Bundle directory.
    template:
        Descriptor used for ``pass.json`` when exporting.
    """

    def __init__(self, pass_path: Path, template: Template) -> None:
        self.pass_path = Path(pass_path)
        self.template = template

    @classmethod
    def from_path(cls, pass_path: Path) -> "Pass":
        """Load ``pass.json`` from *pass_path*.

        Raises
        ------
        PassIOError
            If ``pass.json`` cannot be read.
        pydantic.ValidationError
            If ``pass.json`` is not a valid descriptor.
        """
        descriptor = Path(pass_path) / DESCRIPTOR_FILENAME
        try:
            data = descriptor.read_bytes()
        except OSError as exc:
            raise PassIOError(f"Cannot read {descriptor}: {exc}") from exc
        return cls(pass_path, Template.from_json(data))

    @classmethod
    def from_template(cls, template: Template, pass_path: Path) -> "Pass":
        """Pair a copy of *template* with the resources in *pass_path*."""
        return cls(pass_path, template.model_copy(deep=True))

    def export(
        self,
        certificate_path: Path,
        certificate_password: str,
        intermediate_path: Path,
        output: ArchiveSink,
        force: bool = False,
    ) -> ArchiveSink:
        """Sign and package this pass into *output* (path or binary stream)."""
        return sign_path(
            self.pass_path,
            self.template,
            certificate_path,
            certificate_password,
            intermediate_path,
            output,
            force=force,
        )

    def export_to_file(
        self,
        certificate_path: Path,
        certificate_password: str,
        intermediate_path: Path,
        output_path: Path,
    ) -> Path:
        """Sign and package this pass into the file *output_path*."""
        self.export(certificate_path, certificate_password, intermediate_path, Path(output_path))
        return Path(output_path)

    def __repr__(self) -> str:
        return (
            f"Pass(pass_path={str(self.pass_path)!r}, "
            f"serial_number={self.template.serial_number!r})"
        )


__all__ = ["Pass"]
