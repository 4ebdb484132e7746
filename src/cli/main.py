"""CLI de inat-queue (Typer + Rich).

Capa fina sobre `ApiClient`: todas las peticiones pasan por la misma cola
con rate-limiting que usaría una aplicación.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import typer
from rich.console import Console

from adapters.rison import encode_structured_params
from cli import doctor
from cli.logging_setup import setup_logging
from cli.ui_components import build_auth_panel, build_place_types_table
from core.client import ApiClient
from core.config import AppSettings
from core.domain.errors import TransportError
from core.domain.models import ApiVersion
from core.domain.place_types import PLACE_TYPES

app = typer.Typer(no_args_is_help=True, help="Rate-limited iNaturalist API client.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    settings = AppSettings()
    setup_logging("DEBUG" if verbose else settings.log_level)


def _parse_param(raw: str) -> tuple[str, str]:
    if "=" not in raw:
        raise typer.BadParameter(f"expected key=value, got {raw!r}")
    key, value = raw.split("=", 1)
    if not key:
        raise typer.BadParameter(f"empty key in {raw!r}")
    return key, value


async def _get(
    settings: AppSettings,
    version: ApiVersion,
    endpoint: str,
    params: dict[str, Any] | None,
    fields: str | None,
    token: str | None,
) -> Any:
    async with ApiClient(settings) as client:
        if token:
            ok, info = await client.verify(token)
            if not ok:
                raise TransportError(info.status, info.detail, response=info.response)
        return await client.request(
            "GET",
            version,
            endpoint,
            params=params,
            fields=fields,
        )


@app.command()
def get(
    version: ApiVersion = typer.Argument(..., help="API version (v1 or v2)."),
    endpoint: str = typer.Argument(..., help="Endpoint path, e.g. observations or taxa/47126."),
    param: list[str] = typer.Option([], "--param", "-p", help="Query parameter key=value (repeatable)."),
    fields: Optional[str] = typer.Option(None, "--fields", "-f", help="v2 field selection, e.g. id,uuid"),
    token: Optional[str] = typer.Option(None, "--token", help="API token (defaults to INAT_QUEUE_API_TOKEN)."),
) -> None:
    """Fetch an endpoint and print the JSON response."""

    settings = AppSettings()
    params = dict(_parse_param(p) for p in param) or None

    try:
        data = asyncio.run(_get(settings, version, endpoint, params, fields, token or settings.api_token))
    except TransportError as exc:
        _err_console.print(f"[red]Request failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


@app.command()
def whoami(
    token: Optional[str] = typer.Option(None, "--token", help="API token (defaults to INAT_QUEUE_API_TOKEN)."),
) -> None:
    """Verify an API token and show the authorized login."""

    settings = AppSettings()
    token = token or settings.api_token

    async def _verify() -> tuple[bool, Any, str | None]:
        async with ApiClient(settings) as client:
            ok, info = await client.verify(token)
            return ok, info, client.auth.authorized_identity

    ok, info, identity = asyncio.run(_verify())
    _console.print(build_auth_panel(ok, identity, info))
    if not ok:
        raise typer.Exit(code=1)


@app.command(name="place-types")
def place_types() -> None:
    """List the place type codes used by /places."""

    _console.print(build_place_types_table(PLACE_TYPES))


@app.command(name="encode-fields")
def encode_fields(
    value: str = typer.Argument(..., help="Comma-separated list or JSON object/array of fields."),
) -> None:
    """Encode a v2 field selection, e.g. 'id,user' -> (id:!t,user:!t)."""

    parsed: Any = value
    if value.lstrip().startswith(("{", "[")):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"invalid JSON: {exc}") from exc

    encoded = encode_structured_params(parsed)
    if encoded is None:
        raise typer.BadParameter("unsupported fields value")
    typer.echo(encoded)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
