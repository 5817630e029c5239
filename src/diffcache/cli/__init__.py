"""
DiffCache CLI.

The main Click group lives here; each command module registers its
commands through a ``register_*`` function.

Entry point: diffcache.cli:main
"""

from __future__ import annotations

import click

from .. import __version__
from ._common import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="diffcache")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging.")
def main(verbose):
    """DiffCache -- track changed files across CI runs.

    Diffs the triggering revisions, merges them into the sealed cache,
    and publishes the list of files still to process.
    """
    configure_logging(verbose)


from .run_cmd import register_run_commands
from .keys import register_key_commands

register_run_commands(main)
register_key_commands(main)
