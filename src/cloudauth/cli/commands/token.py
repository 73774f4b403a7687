"""Token and provider commands for cloudauth."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cloudauth.auth.base import AuthProvider
from cloudauth.auth.gce import GceMetadataProvider
from cloudauth.cli.app import ExitCode
from cloudauth.cli.app import app
from cloudauth.core.resolver import get_provider
from cloudauth.display.json import output_json_error
from cloudauth.display.json import output_json_pretty
from cloudauth.errors.types import CloudAuthError
from cloudauth.errors.types import ErrorCategory


def exit_code_for(error: CloudAuthError) -> ExitCode:
    """Map an error category to a process exit code."""
    if error.category in (ErrorCategory.NOT_FOUND, ErrorCategory.PARSE):
        return ExitCode.AUTH_ERROR
    if error.category in (ErrorCategory.NETWORK, ErrorCategory.AUTHENTICATION):
        return ExitCode.NETWORK_ERROR
    if error.category == ErrorCategory.CONFIGURATION:
        return ExitCode.CONFIG_ERROR
    return ExitCode.GENERAL_ERROR


def report_error(console: Console, error: CloudAuthError, json_mode: bool) -> None:
    """Print an error in the requested output mode and exit."""
    if json_mode:
        output_json_error(error)
    else:
        console.print(f"[red]Error:[/red] {escape(error.message)}")
        if error.remediation:
            console.print(f"[dim]{escape(error.remediation)}[/dim]")
    raise typer.Exit(exit_code_for(error))


async def _resolve(console: Console, json_mode: bool) -> AuthProvider:
    try:
        return await get_provider()
    except CloudAuthError as e:
        report_error(console, e, json_mode)


@app.command("token")
async def token_command(ctx: typer.Context) -> None:
    """Print a bearer token from the resolved credential source."""
    console = Console()
    json_mode = ctx.meta.get("json", False)

    provider = await _resolve(console, json_mode)
    try:
        token = await provider.get_token()
    except CloudAuthError as e:
        report_error(console, e, json_mode)

    if json_mode:
        output_json_pretty(
            {
                "token": token.value,
                "expiration": token.expiration.isoformat() if token.expiration else None,
                "provider": provider.name,
            }
        )
        return

    # Plain output so the token can be piped
    typer.echo(token.value)


@app.command("provider")
async def provider_command(ctx: typer.Context) -> None:
    """Show which credential source would be used."""
    console = Console()
    json_mode = ctx.meta.get("json", False)
    verbose = ctx.meta.get("verbose", False)

    provider = await _resolve(console, json_mode)
    details = provider.describe()

    if verbose and isinstance(provider, GceMetadataProvider):
        try:
            info = await provider.service_account_info()
        except CloudAuthError as e:
            report_error(console, e, json_mode)
        details["service_account"] = info.email
        details["scopes"] = " ".join(info.scopes)

    if json_mode:
        output_json_pretty(details)
        return

    table = Table(show_header=False, box=None)
    table.add_column(style="bold")
    table.add_column()
    for key, value in details.items():
        table.add_row(key, value)
    console.print(table)
