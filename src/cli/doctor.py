"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from cli.ui_components import print_banner
from core.client import ApiClient
from core.config import AppSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(f"{settings.base_url.rstrip('/')}/v1/places/1")
        return response.is_success, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


async def _check_token(settings: AppSettings) -> tuple[bool, str]:
    async with ApiClient(settings) as client:
        ok, info = await client.verify(settings.api_token)
        if ok:
            return True, f"Authorized as {client.auth.authorized_identity}"
    return False, f"{info.status}: {info.detail}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    print_banner(_console)

    table = Table(title="inat-queue Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("API base_url", "OK", settings.base_url)
    table.add_row(
        "Rate limit",
        "OK",
        f"{settings.api_cooldown_ms} ms cooldown after {settings.requests_per_minute} queued requests",
    )

    ok_http, detail_http = asyncio.run(_check_http(settings))
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    if settings.api_token:
        ok_token, detail_token = asyncio.run(_check_token(settings))
        table.add_row("API token", "OK" if ok_token else "FAIL", detail_token)
    else:
        table.add_row("API token", "OPTIONAL", "No token set -> unauthenticated requests only")

    _console.print(table)


@app.command(name="setup-token")
def setup_token() -> None:
    """Store an API token in the user config .env.

    Tokens come from https://www.inaturalist.org/users/api_token and expire after 24h.
    """

    token = typer.prompt("iNaturalist API token", hide_input=True, confirmation_prompt=False).strip()
    if not token:
        raise typer.BadParameter("token is required")

    env_path = write_user_env_vars({"INAT_QUEUE_API_TOKEN": token})
    _console.print(f"[green]Saved API token to:[/green] {env_path}")
