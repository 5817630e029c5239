"""The run command: diff, merge, validate, seal, publish."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.markup import escape
from rich.panel import Panel

from ..actions import EventContext, error_annotation
from ..cache import DiffCache
from ..config import load_config
from ..errors import DiffCacheError
from ._common import console, logger


def register_run_commands(main: click.Group) -> None:
    """Register the run command."""

    @main.command("run")
    @click.option("--include", envvar="INPUT_INCLUDE", help="Regex a path must match.")
    @click.option("--exclude", envvar="INPUT_EXCLUDE", help="Regex a path must not match.")
    @click.option("--tag", envvar="INPUT_TAG", help="Cache slot to update.")
    @click.option("--token", envvar=["INPUT_TOKEN", "GITHUB_TOKEN"], help="GitHub API token.")
    @click.option(
        "--cache", envvar="INPUT_CACHE",
        help="Previously stored cache, or 'none' on the first run.",
    )
    @click.option(
        "--secret-name", envvar=["INPUT_SECRET_NAME", "INPUT_CACHE_SECRET"],
        help="Repository secret receiving the sealed cache.",
    )
    @click.option(
        "--config", "config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="YAML file with default inputs.",
    )
    @click.option(
        "--local-store", type=click.Path(dir_okay=False, path_type=Path),
        help="Write the sealed cache to this file instead of a secret.",
    )
    @click.option(
        "--public-key", type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Sealing key for --local-store (from diffcache keygen).",
    )
    def run(include, exclude, tag, token, cache, secret_name, config_file, local_store, public_key):
        """Update the cache with files changed by the triggering event."""
        try:
            config = load_config(
                config_file,
                include=include,
                exclude=exclude,
                tag=tag,
                token=token,
                cache=cache,
                secret_name=secret_name,
            )
            context = EventContext.from_env()
            engine = DiffCache.build(
                config, context, local_path=local_store, public_key_path=public_key,
            )
            result = engine.run()
        except DiffCacheError as exc:
            logger.debug("Run failed", exc_info=True)
            click.echo(error_annotation(f"{type(exc).__name__}: {exc}"))
            console.print(f"[bold red]Run failed:[/] {escape(str(exc))}", highlight=False)
            sys.exit(1)

        status = "[green]saved[/]" if result.saved else "[yellow]unchanged[/]"
        files = escape(result.files) if result.files else "[dim]none[/]"
        console.print(
            Panel(
                f"Range: [cyan]{escape(result.revisions.basehead)}[/]\n"
                f"Changed: [bold]{len(result.changed_files)}[/] file(s)\n"
                f"Removed: [bold]{len(result.removed)}[/] stale entries\n"
                f"Cache: {status}\n"
                f"Files: {files}",
                title=f"diffcache ({escape(config.tag)})",
                border_style="cyan",
            ),
            highlight=False,
        )
