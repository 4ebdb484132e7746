"""Configuración de logging para la CLI.

El Core solo usa `logging.getLogger(__name__)`; quien ejecuta (la CLI)
decide handlers y nivel. Aquí: `RichHandler` sobre stderr para no
ensuciar la salida JSON en stdout.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str | int = "WARNING") -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)

    # httpx loguea cada request en INFO; solo lo queremos en DEBUG.
    logging.getLogger("httpx").setLevel(level if level <= logging.DEBUG else logging.WARNING)
