"""Config inspection commands for cloudauth."""

from __future__ import annotations

import msgspec
import msgspec.toml
import typer
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from cloudauth.cli.atyper import ATyper
from cloudauth.cli.commands.token import report_error
from cloudauth.config.paths import config_dir
from cloudauth.config.paths import config_file
from cloudauth.config.settings import Config
from cloudauth.config.settings import get_config
from cloudauth.errors.types import CloudAuthError

# Create config group
config_app = ATyper(help="Inspect configuration settings.")


def _config_dict(config: Config) -> dict:
    """Convert config to a dict, keeping default values."""
    # omit_defaults would hide everything on a fresh install
    return {
        "http": msgspec.structs.asdict(config.http),
        "metadata": msgspec.structs.asdict(config.metadata),
        "tokens": msgspec.structs.asdict(config.tokens),
    }


@config_app.command("show")
def config_show_command(ctx: typer.Context) -> None:
    """Display current settings, including defaults."""
    console = Console()
    json_mode = ctx.meta.get("json", False)
    config_path = config_file()

    try:
        config = get_config()
    except CloudAuthError as e:
        report_error(console, e, json_mode)

    if json_mode:
        from cloudauth.display.json import output_json_pretty

        data = _config_dict(config)
        data["path"] = str(config_path)
        output_json_pretty(data)
        return

    toml_data = msgspec.toml.encode(_config_dict(config))
    console.print(
        Panel(Syntax(toml_data.decode(), "toml"), title=f"Config: {config_path}")
    )
    if not config_path.exists():
        console.print("[dim]Using default configuration (file not created yet)[/dim]")


@config_app.command("path")
def config_path_command(ctx: typer.Context) -> None:
    """Show the paths cloudauth reads configuration from."""
    json_mode = ctx.meta.get("json", False)

    if json_mode:
        from cloudauth.display.json import output_json_pretty

        output_json_pretty(
            {"config_dir": str(config_dir()), "config_file": str(config_file())}
        )
        return

    typer.echo(str(config_file()))
