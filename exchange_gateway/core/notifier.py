"""Fire-and-forget publication of placed orders to downstream listeners."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor

from ..models.orders import Order
from ..models.shared import TradingPair

logger = logging.getLogger(__name__)

OrderListener = Callable[[str, TradingPair, Order], None]


class OrderNotifier:
    """Publishes orders to subscribed listeners on a background executor.

    ``publish`` never blocks on, or raises from, a listener. Failures are
    logged and dropped.
    """

    def __init__(self, *, executor: Executor | None = None, max_workers: int = 4) -> None:
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="order-notifier"
        )
        self._owns_executor = executor is None
        self._listeners: list[OrderListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: OrderListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: OrderListener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    def publish(self, exchange: str, pair: TradingPair, order: Order) -> Future[None] | None:
        """Schedule delivery of ``order``; returns ``None`` when nobody listens."""

        with self._lock:
            listeners = tuple(self._listeners)
        if not listeners:
            return None
        try:
            return self._executor.submit(self._deliver, listeners, exchange, pair, order)
        except RuntimeError:
            logger.warning("Notifier is shut down, dropping order %s on %s", order.id, exchange)
            return None

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def _deliver(
        self,
        listeners: tuple[OrderListener, ...],
        exchange: str,
        pair: TradingPair,
        order: Order,
    ) -> None:
        for listener in listeners:
            try:
                listener(exchange, pair, order)
            except Exception:
                logger.exception("Failed to publish order %s on %s to %r", order.id, exchange, listener)
