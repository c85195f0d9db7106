"""CLI entry point for wallet-pass.

Invoked as::

    wallet-pass [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m wallet_pass.cli.main

Commands
--------
- ``sign``      Sign a pass directory and write a ``.pkpass`` archive.
- ``version``   Show version information.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

console = Console()
error_console = Console(stderr=True)

PASSWORD_ENVVAR = "WALLET_PASS_CERTIFICATE_PASSWORD"


@click.group()
@click.version_option(package_name="wallet-pass")
def cli() -> None:
    """Build and sign Apple Wallet passes"""


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from wallet_pass import __version__

    console.print(f"[bold]wallet-pass[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# sign
# ---------------------------------------------------------------------------


@cli.command(name="sign")
@click.option(
    "--pass",
    "-p",
    "pass_path",
    required=True,
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    help="Path to the pass directory.",
)
@click.option(
    "--certificate",
    "-c",
    "certificate_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the PKCS#12 (.p12) signing certificate.",
)
@click.option(
    "--password",
    "-w",
    "certificate_password",
    envvar=PASSWORD_ENVVAR,
    default=None,
    help=f"Certificate password. Also read from ${PASSWORD_ENVVAR}.",
)
@click.option(
    "--intermediate",
    "-i",
    "intermediate_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the WWDR intermediate certificate (PEM).",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output file. Default: <pass directory name>.pkpass.",
)
@click.option(
    "--force",
    "-f",
    is_flag=True,
    default=False,
    help="Remove manifest.json and signature from the pass directory if present.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file with signing options. Command-line flags take precedence.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Log every pipeline stage.",
)
def sign_command(
    pass_path: Path,
    certificate_path: Path | None,
    certificate_password: str | None,
    intermediate_path: Path | None,
    output_path: Path | None,
    force: bool,
    config_path: Path | None,
    verbose: bool,
) -> None:
    """Sign an Apple Wallet pass directory with a given certificate.

    Examples:

    \b
        wallet-pass sign -p StoreCard.pass -c cert.p12 -w secret -i wwdr.pem
        wallet-pass sign -p StoreCard.pass --config signing.yaml -o out.pkpass
        wallet-pass sign -p StoreCard.pass --config signing.yaml --force
    """
    from wallet_pass.config import SigningConfig, load_config
    from wallet_pass.errors import WalletPassError
    from wallet_pass.signing.pipeline import SigningPipeline

    _configure_logging(verbose)

    try:
        config = load_config(config_path) if config_path is not None else SigningConfig()
    except (ValueError, WalletPassError) as exc:
        error_console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(1)

    config = config.merge(
        certificate_path=certificate_path,
        certificate_password=certificate_password,
        intermediate_certificate_path=intermediate_path,
        force=True if force else None,
    )
    missing = config.missing()
    if missing:
        flags = {
            "certificate_path": "--certificate",
            "certificate_password": "--password",
            "intermediate_certificate_path": "--intermediate",
        }
        error_console.print(
            "[red]Error:[/red] missing "
            + ", ".join(flags[name] for name in missing)
            + " (pass the flag or set it in --config)."
        )
        sys.exit(1)

    output = output_path or Path(f"{pass_path.resolve().stem or 'Pass'}.pkpass")

    pipeline = SigningPipeline(
        certificate_path=config.certificate_path,  # type: ignore[arg-type]
        certificate_password=config.certificate_password,  # type: ignore[arg-type]
        intermediate_path=config.intermediate_certificate_path,  # type: ignore[arg-type]
        force=config.force,
        tmp_dir=config.tmp_dir,
    )
    try:
        pipeline.run(pass_path, output)
    except WalletPassError as exc:
        error_console.print(f"[red]Signing error ({type(exc).__name__}):[/red] {exc}")
        sys.exit(1)

    console.print(
        Panel(
            f"[bold green]{output}[/bold green]",
            title="Pass Signed",
            expand=False,
        )
    )
    console.print(f"  Pass directory : {pass_path}")
    console.print(f"  Certificate    : {config.certificate_path}")
    console.print(f"  Intermediate   : {config.intermediate_certificate_path}")


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger("wallet_pass")
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=error_console, show_path=False))


if __name__ == "__main__":
    cli()
