"""Signing key management commands."""

import sys
from pathlib import Path

import cyclopts
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from heimdall.cli.console import get_console

app = cyclopts.App(name="keys", help="Signing key management")

PRIVATE_KEY_FILE = "heimdall_ed25519.pem"
PUBLIC_KEY_FILE = "heimdall_ed25519.pub.pem"


def generate_key_pair() -> tuple[bytes, bytes]:
    """A fresh Ed25519 key pair as (private PEM, public PEM)."""
    private_key = Ed25519PrivateKey.generate()
    private_pem = private_key.private_bytes(
        encoding=Encoding.PEM,
        format=PrivateFormat.PKCS8,
        encryption_algorithm=NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=Encoding.PEM,
        format=PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


@app.command
def generate(out_dir: Path = Path("."), *, force: bool = False) -> None:
    """Write a new Ed25519 signing key pair as PEM files.

    Args:
        out_dir: Directory to write the key files to.
        force: Overwrite existing key files.
    """
    console = get_console()
    private_path = out_dir / PRIVATE_KEY_FILE
    public_path = out_dir / PUBLIC_KEY_FILE

    if not force and (private_path.exists() or public_path.exists()):
        console.error(
            f"Key files already exist in {out_dir}",
            hint="Pass --force to overwrite them",
        )
        sys.exit(1)

    private_pem, public_pem = generate_key_pair()
    out_dir.mkdir(parents=True, exist_ok=True)
    private_path.write_bytes(private_pem)
    private_path.chmod(0o600)
    public_path.write_bytes(public_pem)

    console.success(f"Key pair written to {out_dir}")
    console.print(f"  [dim]Private:[/dim] {private_path}")
    console.print(f"  [dim]Public:[/dim]  {public_path}")
    console.info("Set HEIMDALL_AUTH__TOKEN__PRIVATE_KEY and HEIMDALL_AUTH__TOKEN__PUBLIC_KEY")
