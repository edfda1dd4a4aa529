"""
In-memory order store.

The map and the per-order locks are guarded by ``_lock``; each order's
check-tag, mutate, bump-version sequence runs under that order's own lock, so
operations on different ids never wait on each other for longer than a dict
lookup.
"""
from __future__ import annotations

import copy
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Callable

from .errors import NotFoundError, PreconditionFailedError
from .etags import ETag, collection_tag, is_stale, resource_tag
from .models import Order, OrderDraft, OrderStatus

logger = logging.getLogger(__name__)

# Applies a change to the working copy, returns True when something changed.
Mutation = Callable[[Order], bool]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStore:
    def __init__(self, id_prefix: str = "o_", clock: Callable[[], datetime] = _utcnow):
        self._orders: dict[str, Order] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()
        self._id_prefix = id_prefix
        self._clock = clock

    def _new_id(self) -> str:
        while True:
            order_id = f"{self._id_prefix}{uuid.uuid4().hex}"
            if order_id not in self._orders:
                return order_id

    def create(self, draft: OrderDraft) -> Order:
        now = self._clock()
        with self._lock:
            order = Order(
                id=self._new_id(),
                user_id=draft.user_id,
                amount=draft.amount,
                status=draft.status,
                items=copy.deepcopy(draft.items),
                created_at=now,
                canceled_at=now if draft.status == OrderStatus.CANCELED else None,
                version=1,
            )
            self._orders[order.id] = order
            self._locks[order.id] = threading.Lock()
            return order.snapshot()

    def get(self, order_id: str) -> Order:
        with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                raise NotFoundError(order_id)
            return order.snapshot()

    def list(self) -> list[Order]:
        """All orders in insertion order."""
        with self._lock:
            return [order.snapshot() for order in self._orders.values()]

    def list_with_tag(self) -> tuple[list[Order], ETag]:
        """Orders and the collection tag, read under one lock acquisition."""
        with self._lock:
            orders = [order.snapshot() for order in self._orders.values()]
        return orders, collection_tag(orders)

    def count(self) -> int:
        with self._lock:
            return len(self._orders)

    def mutate(self, order_id: str, fn: Mutation, expected_tag: str | None = None) -> tuple[Order, bool]:
        """
        Apply ``fn`` to a working copy of the order and commit it if it changed.

        ``expected_tag`` is checked against the current resource tag before
        ``fn`` runs. If ``fn`` raises, nothing is committed. Returns the
        resulting snapshot and whether a change was committed.
        """
        with self._lock:
            record_lock = self._locks.get(order_id)
        if record_lock is None:
            raise NotFoundError(order_id)

        with record_lock:
            with self._lock:
                current = self._orders.get(order_id)
            # deleted while we were waiting for the record lock
            if current is None:
                raise NotFoundError(order_id)

            tag = resource_tag(current)
            if is_stale(tag, expected_tag):
                raise PreconditionFailedError(expected_tag, str(tag))

            working = current.snapshot()
            changed = fn(working)
            if not changed:
                return current.snapshot(), False

            now = self._clock()
            working.version = current.version + 1
            working.updated_at = now
            # stamped once, the first time the order becomes canceled
            if working.status == OrderStatus.CANCELED and working.canceled_at is None:
                working.canceled_at = now
            with self._lock:
                self._orders[order_id] = working
            logger.debug("Order committed: %s", working)
            return working.snapshot(), True

    def delete(self, order_id: str) -> None:
        with self._lock:
            record_lock = self._locks.get(order_id)
        if record_lock is None:
            raise NotFoundError(order_id)

        with record_lock:
            with self._lock:
                if self._orders.pop(order_id, None) is None:
                    raise NotFoundError(order_id)
                del self._locks[order_id]
