#!/usr/bin/env python3
"""Example: sign a pass directory.

Signs an existing pass bundle (a directory with ``pass.json`` and images)
and writes ``StoreCard.pkpass`` next to it.

Usage:
    python examples/01_sign_directory.py StoreCard.pass Certificates.p12 AppleWWDRCAG4.pem

The certificate password is read from $WALLET_PASS_CERTIFICATE_PASSWORD.

Requirements:
    pip install wallet-pass
"""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import wallet_pass
from wallet_pass import SigningPipeline, WalletPassError


def main() -> int:
    if len(sys.argv) != 4:
        print(__doc__)
        return 2

    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    print(f"wallet-pass version: {wallet_pass.__version__}")

    pass_path, certificate_path, intermediate_path = (Path(arg) for arg in sys.argv[1:])
    output = pass_path.with_suffix(".pkpass")

    pipeline = SigningPipeline(
        certificate_path=certificate_path,
        certificate_password=os.environ.get("WALLET_PASS_CERTIFICATE_PASSWORD", ""),
        intermediate_path=intermediate_path,
    )
    try:
        pipeline.run(pass_path, output)
    except WalletPassError as exc:
        print(f"Signing failed at stage {pipeline.stage.value}: {exc}")
        return 1

    print(f"Wrote {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
