"""Modelos del dominio.

Por qué dataclasses para el descriptor (y no Pydantic):
- Pydantic copia los dicts al validar; el descriptor debe guardar `headers`
  *por referencia* para que un cambio de credencial mientras la petición
  espera en cola se vea en el momento del despacho.
- Los callbacks son objetos arbitrarios; no hay nada que serializar.

Las respuestas de la API sí se parsean con Pydantic v2 (`UsersMeResponse`).
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Union

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from core.domain.errors import DescriptorValidationError


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"


class ApiVersion(str, Enum):
    """Versiones de la API; determinan el prefijo de la URL.

    Solo `v2` admite el parámetro `fields`.
    """

    V1 = "v1"
    V2 = "v2"


SuccessCallback = Callable[[Any], Union[None, Awaitable[None]]]
ErrorCallback = Callable[[Any, str, str], Union[None, Awaitable[None]]]
FieldsSpec = Union[str, Mapping[str, Any], Sequence[Any]]


def _coerce_enum(enum_cls: type[Enum], value: Any, name: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        raw = value.strip()
        try:
            return enum_cls(raw.upper() if enum_cls is HttpMethod else raw.lower())
        except ValueError:
            pass
    allowed = ", ".join(m.value for m in enum_cls)  # type: ignore[attr-defined]
    raise DescriptorValidationError(f"{name} must be one of: {allowed} (got {value!r})")


@dataclass
class RequestDescriptor:
    """Unidad de trabajo: una llamada saliente y sus callbacks de finalización.

    Requeridos: `method`, `api_version`, `endpoint`, `on_success`, `on_error`.
    Se valida al construir; un descriptor inválido nunca llega a la cola.
    """

    method: HttpMethod
    api_version: ApiVersion
    endpoint: str
    on_success: SuccessCallback
    on_error: ErrorCallback
    params: Mapping[str, Any] | None = None
    fields: FieldsSpec | None = None
    data: Any = None
    headers: MutableMapping[str, str] | None = None

    def __post_init__(self) -> None:
        self.method = _coerce_enum(HttpMethod, self.method, "method")
        self.api_version = _coerce_enum(ApiVersion, self.api_version, "api_version")

        if not isinstance(self.endpoint, str) or not self.endpoint.strip("/ "):
            raise DescriptorValidationError("endpoint must be a non-empty string")
        self.endpoint = self.endpoint.strip().strip("/")

        if not callable(self.on_success):
            raise DescriptorValidationError("on_success must be callable")
        if not callable(self.on_error):
            raise DescriptorValidationError("on_error must be callable")

        if self.params is not None and not isinstance(self.params, Mapping):
            raise DescriptorValidationError("params must be a mapping or None")
        if self.fields is not None and not isinstance(self.fields, (str, Mapping, Sequence)):
            raise DescriptorValidationError("fields must be a string, mapping or sequence")
        if self.headers is not None and not isinstance(self.headers, MutableMapping):
            raise DescriptorValidationError("headers must be a mutable mapping or None")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "RequestDescriptor":
        """Construye un descriptor desde un dict plano.

        Acepta también las claves al estilo JS (`apiVersion`, `success`, `error`).
        """

        if not isinstance(raw, Mapping):
            raise DescriptorValidationError("request descriptor must be a mapping")

        aliases = {"apiVersion": "api_version", "success": "on_success", "error": "on_error"}
        values = {aliases.get(k, k): v for k, v in raw.items()}

        required = ("method", "api_version", "endpoint", "on_success", "on_error")
        missing = [k for k in required if values.get(k) is None]
        if missing:
            raise DescriptorValidationError(f"request descriptor is missing: {', '.join(missing)}")

        known = {
            "method", "api_version", "endpoint", "on_success", "on_error",
            "params", "fields", "data", "headers",
        }
        unknown = sorted(set(values) - known)
        if unknown:
            raise DescriptorValidationError(f"unknown request keys: {', '.join(unknown)}")

        return cls(**values)


@dataclass(frozen=True)
class RequestFailure:
    """Lo que recibe `on_error`: (handle de transporte, estado, detalle)."""

    response: Any
    status: str
    detail: str
    status_code: int | None = None


@dataclass(frozen=True)
class RequestOutcome:
    """Resultado con el que se resuelve el future devuelto al encolar."""

    ok: bool
    data: Any = None
    failure: RequestFailure | None = None


@dataclass(frozen=True)
class AuthFailureInfo:
    """Información de error entregada al callback de `verify`."""

    response: Any
    status: str
    detail: str
    extra: dict[str, Any] = field(default_factory=dict)


class UserSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    login: str = Field(
        ...,
        min_length=1,
        description="Login de la cuenta autenticada.",
    )


class UsersMeResponse(BaseModel):
    """Respuesta de `GET /v2/users/me?fields=(login:!t)`."""

    model_config = ConfigDict(extra="ignore")

    total_results: int | None = Field(
        default=None,
        description="Número de resultados (siempre 1 para un token válido).",
    )
    results: list[UserSummary] = Field(
        ...,
        min_length=1,
        description="Usuario autenticado; solo se usa el primer elemento.",
    )
