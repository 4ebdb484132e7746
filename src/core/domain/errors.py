"""Errores del dominio.

Taxonomía:
- `DescriptorValidationError`: el llamador construyó un descriptor incompleto.
  Se lanza al encolar, nunca al despachar.
- `TransportError`: la llamada HTTP falló. No cruza la frontera de la cola;
  el scheduler la convierte en el callback `on_error` del descriptor.
"""

from __future__ import annotations

from typing import Any


class InatQueueError(Exception):
    """Base de los errores propios del cliente."""


class DescriptorValidationError(InatQueueError, ValueError):
    """Descriptor de petición inválido (faltan claves o tienen tipos erróneos)."""


class TransportError(InatQueueError):
    """Fallo de la llamada saliente.

    `status` sigue los textos de estado de jQuery (`error`, `timeout`,
    `parsererror`) y `detail` el texto del error (reason phrase HTTP o
    mensaje de la excepción).
    """

    def __init__(
        self,
        status: str,
        detail: str,
        *,
        response: Any = None,
        status_code: int | None = None,
    ) -> None:
        self.status = status
        self.detail = detail
        self.response = response
        self.status_code = status_code
        super().__init__(f"{status}: {detail}" if detail else status)
