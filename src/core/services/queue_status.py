"""Espera activa (con callback) al vaciado de la cola.

Contrato externo: `callback(True)` en cada comprobación mientras la cola
esté activa y un único `callback(False)` final, tras el cual se deja de
comprobar. En lugar de re-programar un timer a ciegas, cada espera se
despierta antes si el scheduler señala que la cola se ha vaciado.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from core.services.scheduler import RequestScheduler

StatusCallback = Callable[[bool], None]


class QueueStatusPoller:
    def __init__(self, scheduler: RequestScheduler) -> None:
        self._scheduler = scheduler
        self._tasks: set[asyncio.Task[None]] = set()

    def check(self, interval_ms: float, callback: StatusCallback) -> asyncio.Task[None] | None:
        """Primera comprobación síncrona; las siguientes cada `interval_ms`.

        Devuelve la tarea de sondeo, o `None` si la cola ya estaba inactiva.
        """

        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")

        if not self._scheduler.is_active:
            callback(False)
            return None

        callback(True)
        task = asyncio.get_running_loop().create_task(self._poll(interval_ms / 1000.0, callback))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _poll(self, interval: float, callback: StatusCallback) -> None:
        idle = self._scheduler.idle_event
        while True:
            try:
                await asyncio.wait_for(idle.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

            if not self._scheduler.is_active:
                callback(False)
                return
            callback(True)
