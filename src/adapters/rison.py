"""Codificador de selección de campos (RISON reducido) para la API v2.

La API v2 de iNaturalist acepta `fields=(id:!t,user:(login:!t))`: un árbol
de claves donde cada hoja lleva el marcador booleano `!t`. Solo hace falta
selección de campos, nunca valores arbitrarios, así que cualquier escalar
se codifica como `!t`.

El servidor lo parsea con una gramática fija: la salida tiene que ser
byte-exacta (paréntesis balanceados, `:!t` tras cada hoja).

Ver: https://api.inaturalist.org/v2/docs/
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

TRUE_MARKER = "!t"


def _is_composite(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def _sequence_item(value: Any) -> str | None:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def encode_structured_params(value: Any) -> str | None:
    """Convierte un dict/lista/string de claves en la cadena de campos v2.

    - dict: `{"a": 1, "b": {"c": 1}}` -> `(a:!t,b:(c:!t))`
    - lista: `["x", "y"]` -> `(x:!t,y:!t)`
    - string: `"p,q"` -> `(p:!t,q:!t)`; `"p"` -> `(p:!t)`

    Devuelve `None` si la entrada (o algún elemento anidado) no es de un
    tipo soportado; no lanza, para que el llamador decida cómo reportarlo.
    """

    if isinstance(value, Mapping):
        parts: list[str] = []
        for key, item in value.items():
            if _is_composite(item):
                nested = encode_structured_params(item)
                if nested is None:
                    return None
                parts.append(f"{key}:{nested}")
            else:
                parts.append(f"{key}:{TRUE_MARKER}")
        return "(" + ",".join(parts) + ")"

    if isinstance(value, (list, tuple)):
        items: list[str] = []
        for item in value:
            text = _sequence_item(item)
            if text is None:
                return None
            items.append(text)
        return "(" + f":{TRUE_MARKER},".join(items) + f":{TRUE_MARKER})"

    if isinstance(value, str):
        if "," in value:
            return encode_structured_params(value.split(","))
        return f"({value}:{TRUE_MARKER})"

    return None
