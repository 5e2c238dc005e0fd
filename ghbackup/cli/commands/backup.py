"""CLI for backing up all repositories of an organisation into a zip archive."""

from __future__ import annotations

import typer

from ...config.settings import build_config, get_settings
from ...core.errors import BackupError, DeadlineExceeded
from ...core.utils import split_globs
from ...services.backup import backup_org


def backup(
    org: str | None = typer.Option(None, help="GitHub organisation login (env ORG)"),
    token: str | None = typer.Option(None, help="GitHub PAT (env GITHUB_TOKEN)"),
    dest: str | None = typer.Option(None, "--dest", help="Where the working directory and archive are created"),
    workers: int | None = typer.Option(None, "--workers", "-j", min=1, help="Parallel clone workers"),
    timeout: float | None = typer.Option(None, "--timeout", min=1, help="Run timeout in seconds"),
    max_pages: int | None = typer.Option(None, "--max-pages", min=1, help="Upper bound on listing pages"),
    only: str | None = typer.Option(None, "--only", help="Comma-separated repo globs to clone"),
    exclude: str | None = typer.Option(None, "--exclude", help="Comma-separated repo globs to skip"),
    keep_dir: bool = typer.Option(False, "--keep-dir", help="Keep the working directory after packaging"),
):
    """Clone every repository of an org and package them with the listing into one zip.

    Examples:
      ghbackup backup --org pallets
      ghbackup backup --org pallets --workers 8 --exclude 'archive-*'
    """
    try:
        cfg = build_config(
            get_settings(),
            org=org,
            token=token,
            dest=dest,
            workers=workers,
            max_pages=max_pages,
            timeout_sec=timeout,
            only_globs=split_globs(only),
            exclude_globs=split_globs(exclude),
            keep_dir=keep_dir,
        )
        result = backup_org(cfg)
    except DeadlineExceeded as e:
        typer.secho(f"[timeout] {e}", err=True, fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)
    except BackupError as e:
        typer.secho(f"[fatal] {e}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(f"Archive written to {result.archive_path}")
