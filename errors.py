"""
Order Errors
============
Exception taxonomy shared by the catalog, pancake, order and ledger modules.

- InvalidArgumentError: malformed input at the boundary, raised before any
  state is touched.
- OrderNotFoundError: the referenced order is not in the expected container.
- InvalidStateError: the order's current status forbids the operation.

An empty queue is not an error: the advance operations return None instead.
"""

from typing import Optional
from uuid import UUID


class OrderError(Exception):
    """Base class for all order ledger errors."""

    def __init__(self, message: str, order_id: Optional[UUID] = None):
        super().__init__(message)
        self.order_id = order_id


class InvalidArgumentError(OrderError, ValueError):
    """Raised when input is malformed (bad building, room or ingredient)."""
    pass


class OrderNotFoundError(OrderError, LookupError):
    """Raised when an order id is absent from the container it should be in."""
    pass


class InvalidStateError(OrderError, RuntimeError):
    """Raised when a transition is attempted from a status that forbids it."""
    pass
