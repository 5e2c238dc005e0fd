"""CLI for listing an organisation's repositories."""

from __future__ import annotations

import contextlib
import sys

import typer

from ...config.settings import build_config, get_settings
from ...core.errors import BackupError
from ...services.listing import format_repositories, list_repositories


def list_repos(
    org: str | None = typer.Option(None, help="GitHub organisation login (env ORG)"),
    token: str | None = typer.Option(None, help="GitHub PAT (env GITHUB_TOKEN)"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw listing as JSON"),
):
    """Print every repository the token can see in the org."""
    try:
        # keep stdout clean for the listing itself
        with contextlib.redirect_stdout(sys.stderr):
            repos = list_repositories(build_config(get_settings(), org=org, token=token))
    except BackupError as e:
        typer.secho(f"[fatal] {e}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)
    if repos:
        typer.echo(format_repositories(repos, as_json=as_json))
    typer.echo(f"{len(repos)} repositories.", err=True)
