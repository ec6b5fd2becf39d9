"""Typer-based command line interface for the Sophos XG firewall XML API."""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from sophos_xgapi import __version__
from sophos_xgapi.commands.entities import entity_get, entity_remove, entity_set
from sophos_xgapi.config import Settings

app = typer.Typer(
    no_args_is_help=True,
    help="Get, set and remove Sophos XG firewall entities over the XML API.",
)
console = Console()

app.command("get")(entity_get)
app.command("set")(entity_set)
app.command("remove")(entity_remove)


@app.callback()
def common_options(
    ctx: typer.Context,
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Optional .env file with SOPHOS_XGAPI_* variables.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log request details."),
) -> None:
    """Load shared configuration for all commands."""

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )
    ctx.obj = {"settings": Settings.from_env_file(env_file)}


@app.command("version")
def show_version() -> None:
    """Show the installed sophos-xgapi version."""

    console.print(f"sophos-xgapi {__version__}")
