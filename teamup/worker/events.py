import asyncio
import logging
from typing import Awaitable, List

logger = logging.getLogger(__name__)


class ExtendableEvent:
    """
    Événement traité par le worker (fetch, push, clic sur notification).

    ``wait_until`` signale à l'hôte de ne pas suspendre le worker tant que le
    travail enregistré n'est pas terminé ; ``settle`` attend tout ce travail.
    """

    def __init__(self) -> None:
        self._pending: List[asyncio.Future] = []

    def wait_until(self, awaitable: Awaitable) -> asyncio.Future:
        future = asyncio.ensure_future(awaitable)
        self._pending.append(future)
        return future

    @property
    def pending(self) -> int:
        return sum(1 for f in self._pending if not f.done())

    async def settle(self) -> None:
        # Le travail enregistré peut lui-même en enregistrer d'autres
        while self._pending:
            batch, self._pending = self._pending, []
            results = await asyncio.gather(*batch, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    logger.warning(f"⚠️ Tâche de fond du worker en échec : {result!r}")
