"""Autenticación por token contra la API.

Estados: no autenticado -> (verify pendiente) -> autorizado | no autenticado.

Por qué la sonda va por la cola:
- Comparte rate-limiting y orden con el resto de peticiones; un `verify`
  no se cuela delante de lo ya encolado.

El header `Authorization` vive en `RequestScheduler.auth_headers` y se
comparte por referencia: las peticiones que ya esperan en cola con esos
headers usarán la credencial vigente al despacharse, no la de cuando se
encolaron.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from pydantic import ValidationError

from core.domain.models import (
    ApiVersion,
    AuthFailureInfo,
    HttpMethod,
    RequestDescriptor,
    RequestOutcome,
    UsersMeResponse,
)
from core.services.scheduler import RequestScheduler

logger = logging.getLogger(__name__)

VerifyCallback = Callable[..., Any]

PROBE_ENDPOINT = "users/me"
PROBE_FIELDS = "login"


class AuthManager:
    def __init__(self, scheduler: RequestScheduler) -> None:
        self._scheduler = scheduler
        self._identity: str | None = None

    @property
    def headers(self) -> dict[str, str]:
        return self._scheduler.auth_headers

    @property
    def token(self) -> str | None:
        return self.headers.get("Authorization") or None

    @property
    def authorized_identity(self) -> str | None:
        """Login verificado, o `None` si no hay credencial verificada."""

        return self._identity

    @property
    def is_authorized(self) -> bool:
        return self._identity is not None

    def _clear(self) -> None:
        self.headers["Authorization"] = ""
        self._identity = None

    def verify(self, token: str | None, callback: VerifyCallback) -> Optional[asyncio.Future[RequestOutcome]]:
        """Verifica `token` con una sonda a `users/me`.

        - Token vacío: `callback(False)` inmediatamente, sin despachar nada.
        - Éxito: guarda el login y llama `callback(True, body)`.
        - Error: limpia header e identidad y llama `callback(False, AuthFailureInfo)`.
        """

        if not token:
            self._clear()
            callback(False)
            return None

        # Mientras la sonda está pendiente no hay identidad verificada.
        self._identity = None
        self.headers["Authorization"] = token

        def on_success(body: Any) -> None:
            try:
                me = UsersMeResponse.model_validate(body)
            except ValidationError as exc:
                logger.warning("Unexpected %s response shape; treating token as invalid", PROBE_ENDPOINT)
                self._clear()
                callback(False, AuthFailureInfo(response=None, status="parsererror", detail=str(exc), extra={"body": body}))
                return

            self._identity = me.results[0].login
            logger.info("Authenticated as %s", self._identity)
            callback(True, body)

        def on_error(response: Any, status: str, detail: str) -> None:
            logger.info("Token verification failed: %s %s", status, detail)
            self._clear()
            callback(False, AuthFailureInfo(response=response, status=status, detail=detail))

        return self._scheduler.enqueue(
            RequestDescriptor(
                method=HttpMethod.GET,
                api_version=ApiVersion.V2,
                endpoint=PROBE_ENDPOINT,
                fields=PROBE_FIELDS,
                headers=self.headers,
                on_success=on_success,
                on_error=on_error,
            )
        )
