"""CLI entrypoint that wires commands into a Typer app."""

import typer

from .commands.backup import backup
from .commands.list import list_repos

app = typer.Typer(add_completion=False, help="Back up every repository of a GitHub org into one zip archive.")


app.command("backup", help="Clone all org repositories and package them into a zip")(backup)
app.command("list", help="List all org repositories")(list_repos)


if __name__ == "__main__":
    app()
