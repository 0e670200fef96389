"""
Order Containers
================
Thread-safe containers shared by every ledger caller.

- OrderIndex: order id -> Order mapping (pending index, all-orders index)
- OrderQueue: FIFO of orders awaiting the next processing stage

Every public method takes the container's lock, so each insert, remove
and scan is atomic with respect to the other mutations of the same
container. Snapshots are shallow copies; callers never get a handle on
the internal structure.
"""

from collections import deque
from types import MappingProxyType
from typing import Deque, Dict, Mapping, Optional, Tuple
from uuid import UUID
import threading

from order import Order


class OrderIndex:
    """Concurrent-safe order id -> Order mapping."""

    def __init__(self, name: str):
        self.name = name
        self._orders: Dict[UUID, Order] = {}
        self._lock = threading.RLock()

    def put(self, order: Order) -> None:
        with self._lock:
            self._orders[order.id] = order

    def get(self, order_id: UUID) -> Optional[Order]:
        with self._lock:
            return self._orders.get(order_id)

    def pop(self, order_id: UUID) -> Optional[Order]:
        """Remove and return the order, or None if absent."""
        with self._lock:
            return self._orders.pop(order_id, None)

    def snapshot(self) -> Mapping[UUID, Order]:
        """Read-only copy of the index."""
        with self._lock:
            return MappingProxyType(dict(self._orders))

    def __contains__(self, order_id) -> bool:
        with self._lock:
            return order_id in self._orders

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)


class OrderQueue:
    """
    Concurrent-safe FIFO of orders (head on the left).

    Non-blocking: popleft() on an empty queue returns None immediately.
    """

    def __init__(self, name: str):
        self.name = name
        self._orders: Deque[Order] = deque()
        self._lock = threading.RLock()

    def append(self, order: Order) -> None:
        """Add order at the tail."""
        with self._lock:
            self._orders.append(order)

    def popleft(self) -> Optional[Order]:
        """Remove and return the head, or None if empty."""
        with self._lock:
            if not self._orders:
                return None
            return self._orders.popleft()

    def remove(self, order_id: UUID) -> Optional[Order]:
        """Remove the order with this id wherever it sits, or return None."""
        with self._lock:
            for order in self._orders:
                if order.id == order_id:
                    self._orders.remove(order)
                    return order
            return None

    def peek(self) -> Optional[Order]:
        """Head of the queue without removing it."""
        with self._lock:
            return self._orders[0] if self._orders else None

    def snapshot(self) -> Tuple[Order, ...]:
        """Immutable copy of the queue in FIFO order."""
        with self._lock:
            return tuple(self._orders)

    def ids(self) -> Tuple[UUID, ...]:
        with self._lock:
            return tuple(order.id for order in self._orders)

    def __contains__(self, order_id) -> bool:
        with self._lock:
            return any(order.id == order_id for order in self._orders)

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)
