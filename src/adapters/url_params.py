"""Parser de parámetros de URL (uso diagnóstico/utilidad)."""

from __future__ import annotations

import re
from typing import overload
from urllib.parse import unquote

# `?` y `&` separan pares; la clave no puede contenerlos.
_PAIR_RE = re.compile(r"[?&]?([^=&?]+)=([^&]*)")


@overload
def parse_url_params(url: str) -> dict[str, str]: ...


@overload
def parse_url_params(url: str, key: str) -> str | None: ...


def parse_url_params(url: str, key: str | None = None) -> dict[str, str] | str | None:
    """Decodifica los pares `clave=valor` de una URL o query string.

    - El orden del dict es el de primera aparición; una clave repetida
      sobrescribe el valor anterior.
    - Los valores se decodifican con `%XX` (un `+` se conserva literal).
    - Con `key`, devuelve solo ese valor (o `None` si no aparece).
    """

    params: dict[str, str] = {}
    for match in _PAIR_RE.finditer(url):
        params[match.group(1)] = unquote(match.group(2))

    if key:
        return params.get(key)
    return params
