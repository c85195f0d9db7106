#!/usr/bin/env python3
"""Example: personalise a pass before signing.

Loads the descriptor of a bundle, sets a serial number, a balance field
and a QR barcode, then exports a signed archive.  The bundle on disk is
not modified.

Usage:
    python examples/02_edit_descriptor.py StoreCard.pass Certificates.p12 AppleWWDRCAG4.pem

Requirements:
    pip install wallet-pass
"""
from __future__ import annotations

import os
import sys
from pathlib import Path

from wallet_pass import Barcode, BarcodeFormat, Details, Pass, PassField


def main() -> int:
    if len(sys.argv) != 4:
        print(__doc__)
        return 2

    pass_path, certificate_path, intermediate_path = (Path(arg) for arg in sys.argv[1:])

    pass_ = Pass.from_path(pass_path)
    pass_.template.serial_number = "1234567890"
    pass_.template.store_card = Details()
    pass_.template.store_card.add_primary_field(
        PassField(key="balance", label="Balance", value=13.37, currency_code="EUR")
    )
    pass_.template.add_barcode(Barcode(format=BarcodeFormat.QR, message="1234567890"))

    output = pass_.export_to_file(
        certificate_path,
        os.environ.get("WALLET_PASS_CERTIFICATE_PASSWORD", ""),
        intermediate_path,
        Path(f"{pass_.template.serial_number}.pkpass"),
    )
    print(f"Wrote {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
