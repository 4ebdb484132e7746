"""Construcción de URLs salientes.

Por qué un módulo propio:
- La API espera los parámetros anidados al estilo de `jQuery.param`
  (`a[b]=1`, `ids[]=1&ids[]=2`), algo que `httpx.QueryParams` no aplana
  por sí solo. Aquí se aplanan y `httpx` se encarga del encoding.
- Reúne en un solo sitio la regla del parámetro `fields` (solo v2).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from adapters.rison import encode_structured_params
from core.domain.models import ApiVersion, RequestDescriptor


class FieldsEncodingError(ValueError):
    """`fields` no se pudo codificar; se reporta vía `on_error` del descriptor."""


def _scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _flatten(prefix: str, value: Any, out: list[tuple[str, str]]) -> None:
    if isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            if prefix.endswith("[]"):
                out.append((prefix, _scalar(item)))
            else:
                composite = isinstance(item, (Mapping, list, tuple))
                _flatten(f"{prefix}[{index if composite else ''}]", item, out)
    elif isinstance(value, Mapping):
        for name, item in value.items():
            _flatten(f"{prefix}[{name}]", item, out)
    else:
        out.append((prefix, _scalar(value)))


def flatten_params(params: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Aplana parámetros (posiblemente anidados) a pares `(clave, valor)`."""

    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        _flatten(str(key), value, pairs)
    return pairs


def build_query_string(params: Mapping[str, Any]) -> str:
    return str(httpx.QueryParams(flatten_params(params)))


def _has_fields(fields: Any) -> bool:
    if fields is None:
        return False
    if isinstance(fields, (str, Mapping, list, tuple)):
        return len(fields) > 0
    return True


def build_request_url(base_url: str, descriptor: RequestDescriptor) -> str:
    """`<base>/<version>/<endpoint>[?<params>][&fields=<codificado>]`.

    Lanza `FieldsEncodingError` si `fields` no es codificable.
    """

    url = "/".join([base_url.rstrip("/"), descriptor.api_version.value, descriptor.endpoint])

    has_query = bool(descriptor.params)
    if has_query:
        url += "?" + build_query_string(descriptor.params)

    if descriptor.api_version is ApiVersion.V2 and _has_fields(descriptor.fields):
        encoded = encode_structured_params(descriptor.fields)
        if encoded is None:
            raise FieldsEncodingError(f"unsupported fields value: {descriptor.fields!r}")
        url += ("&" if has_query else "?") + "fields=" + encoded

    return url
