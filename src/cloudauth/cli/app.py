"""Main CLI application for cloudauth."""

from __future__ import annotations

import logging
from enum import IntEnum

import typer

from cloudauth.cli.atyper import ATyper

# Create the main app
app = ATyper(
    name="cloudauth",
    help="Resolve Google Cloud credentials and print bearer tokens",
    add_completion=False,
    no_args_is_help=False,
    invoke_without_command=True,
)


class ExitCode(IntEnum):
    """Exit codes for cloudauth."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 2
    NETWORK_ERROR = 3
    CONFIG_ERROR = 4


def configure_logging(verbose: bool) -> None:
    """Route cloudauth logging to stderr through rich."""
    from rich.console import Console
    from rich.logging import RichHandler

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logger = logging.getLogger("cloudauth")
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def main(
    ctx: typer.Context,
    json: bool = typer.Option(False, "--json", "-j", help="Enable JSON output mode"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log each resolution step"
    ),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """cloudauth - Resolve Google Cloud credentials."""
    if version:
        from cloudauth import __version__

        typer.echo(f"cloudauth {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    configure_logging(verbose)

    ctx.meta["json"] = json
    ctx.meta["verbose"] = verbose


def run_app() -> None:
    """Run the CLI app."""
    app()


# Import command modules - they register themselves via @app.command() decorators
from cloudauth.cli.commands import token  # noqa: E402,F401 (registers token and provider)
from cloudauth.cli.commands import config as config_cmd  # noqa: E402

app.add_typer(config_cmd.config_app, name="config")
