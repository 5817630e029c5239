"""Owner-side key commands: keygen and inspect.

These hold the private key, so they never run inside a CI step.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.markup import escape
from rich.table import Table

from ..cache import codec
from ..cache.backends import LocalSecretBackend
from ..errors import CacheDecodeError
from ._common import console

PUBLIC_KEY_FILE = "diffcache.pub"
PRIVATE_KEY_FILE = "diffcache.key"


def register_key_commands(main: click.Group) -> None:
    """Register keygen and inspect."""

    @main.command("keygen")
    @click.option(
        "--out", default=".", type=click.Path(file_okay=False, path_type=Path),
        help="Directory for the key files.",
    )
    @click.option("--force", is_flag=True, help="Overwrite existing keys.")
    def keygen(out, force):
        """Generate a sealing keypair for local stores."""
        out = out.expanduser()
        public_path = out / PUBLIC_KEY_FILE
        private_path = out / PRIVATE_KEY_FILE
        if private_path.exists() and not force:
            console.print(f"[bold red]Key exists:[/] {escape(str(private_path))} (use --force)")
            sys.exit(1)

        public_key, private_key = codec.generate_keypair()
        out.mkdir(parents=True, exist_ok=True)
        public_path.write_text(public_key + "\n", encoding="utf-8")
        private_path.write_text(private_key + "\n", encoding="utf-8")
        private_path.chmod(0o600)

        console.print(f"  Public key:  [cyan]{public_path}[/]")
        console.print(f"  Private key: [cyan]{private_path}[/] [dim](keep secret)[/]")

    @main.command("inspect")
    @click.argument("store", type=click.Path(exists=True, dir_okay=False, path_type=Path))
    @click.option(
        "--private-key", required=True,
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Private key matching the store's public key.",
    )
    def inspect(store, private_key):
        """Open a local sealed cache and show its tags."""
        backend = LocalSecretBackend(store)
        try:
            sealed = backend.read()
            compressed = codec.unseal(sealed, private_key.read_text(encoding="utf-8"))
            mapping = codec.decode_cache(compressed)
        except (KeyError, ValueError, CacheDecodeError) as exc:
            console.print(f"[bold red]Unable to open {escape(str(store))}:[/] {escape(str(exc))}")
            sys.exit(1)

        table = Table(title=str(store))
        table.add_column("Tag", style="cyan")
        table.add_column("Files")
        for tag, files in sorted(mapping.items()):
            table.add_row(escape(tag), escape(files.replace(" ", "\n")))
        console.print(table)
