"""Command-line interface for wallet-pass."""
