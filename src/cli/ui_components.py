"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Mapping

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import AuthFailureInfo


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Evita dependencias circulares (main <-> doctor).
    - Permite desactivar banner en modos no interactivos (JSON/pipelines).
    """

    title = Text("inat-queue", style="bold green")
    subtitle = Text("iNaturalist API • cola con rate-limiting", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="green", padding=(1, 4)))


def build_place_types_table(place_types: Mapping[int, str]) -> Table:
    table = Table(title="Place Types")
    table.add_column("Code", style="cyan", justify="right", no_wrap=True)
    table.add_column("Name", style="white")
    for code, name in sorted(place_types.items()):
        table.add_row(str(code), name)
    return table


def build_auth_panel(ok: bool, identity: str | None, info: object = None) -> Panel:
    """Panel con el resultado de verificar un token."""

    body = Text()
    if ok:
        body.append("Authorized as ", style="bold")
        body.append(identity or "?", style="bold green")
        return Panel(body, title=Text("Auth", style="bold green"), border_style="green")

    if isinstance(info, AuthFailureInfo):
        body.append(f"{info.status}: {info.detail}", style="red")
    else:
        body.append("No token provided.", style="yellow")
    return Panel(body, title=Text("Auth", style="bold red"), border_style="red")
