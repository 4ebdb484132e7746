"""Cola FIFO de peticiones pendientes.

El orden de inserción es el orden de despacho: no hay prioridades ni
reordenación, y una entrada encolada no se puede retirar.
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass, field
from typing import Iterator

from core.domain.models import RequestDescriptor, RequestOutcome


@dataclass(eq=False)
class QueuedRequest:
    """Descriptor + future que lo representa ante el llamador.

    `claim()` solo puede llamarse una vez: es lo que garantiza que cada
    descriptor dispara exactamente uno de sus callbacks. El future se
    resuelve (`resolve`) después de ejecutar ese callback.
    """

    descriptor: RequestDescriptor
    future: asyncio.Future[RequestOutcome]
    settled: bool = field(default=False, init=False)

    def claim(self) -> None:
        if self.settled:
            raise RuntimeError(
                f"request {self.descriptor.method.value} {self.descriptor.endpoint} already completed"
            )
        self.settled = True

    def resolve(self, outcome: RequestOutcome) -> None:
        if not self.future.done():
            self.future.set_result(outcome)


class RequestQueue:
    def __init__(self) -> None:
        self._items: deque[QueuedRequest] = deque()

    def push(self, item: QueuedRequest) -> None:
        self._items.append(item)

    def pop(self) -> QueuedRequest:
        """Saca la cabeza de la cola. `IndexError` si está vacía."""

        return self._items.popleft()

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[QueuedRequest]:
        return iter(tuple(self._items))
