"""
Order Module
============
Order entity and its lifecycle state machine.

State transitions:
INIT → CREATED → PREPARED → DELIVERED
INIT → CANCELED
CREATED → CANCELED

Terminal states: DELIVERED, CANCELED

Guarantees:
- Building and room are fixed at creation
- Pancakes can only be appended while INIT
- Every transition is guarded and raises InvalidStateError naming the
  violated precondition
- All mutations hold the order's lock; the lock is reentrant so the
  ledger can hold it across a check-then-transition sequence
"""

import logging
import threading
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Tuple

from prometheus_client import Counter

from errors import InvalidArgumentError, InvalidStateError
from pancake import Pancake


logger = logging.getLogger(__name__)


DEFAULT_MAX_PANCAKES = 50


# ============================================================================
# METRICS
# ============================================================================

order_state_transitions = Counter(
    'pancake_order_state_transitions_total',
    'Order state transitions',
    ['from_state', 'to_state']
)


# ============================================================================
# ORDER STATUS
# ============================================================================

class OrderStatus(Enum):
    """Order lifecycle states."""
    INIT = "init"              # Being composed, pancakes may be added
    CREATED = "created"        # Placed, waiting to be prepared
    PREPARED = "prepared"      # Prepared, waiting to be delivered
    DELIVERED = "delivered"    # Delivered (terminal)
    CANCELED = "canceled"      # Canceled (terminal)


VALID_TRANSITIONS = {
    OrderStatus.INIT: {OrderStatus.CREATED, OrderStatus.CANCELED},
    OrderStatus.CREATED: {OrderStatus.PREPARED, OrderStatus.CANCELED},
    OrderStatus.PREPARED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELED: set(),   # Terminal
}


# ============================================================================
# ORDER
# ============================================================================

class Order:
    """
    Pancake order delivered to a building and room.

    Each transition method is the only writer of the status field. The
    ledger moves orders between its containers; the order itself only
    validates and updates its own status.
    """

    def __init__(
        self,
        building: int,
        room: int,
        max_pancakes: int = DEFAULT_MAX_PANCAKES
    ):
        """
        Initialize order in INIT status.

        Raises:
            InvalidArgumentError: If building or room is not positive
        """
        validate_building_and_room(building, room)

        self._id = uuid.uuid4()
        self._building = building
        self._room = room
        self.max_pancakes = max_pancakes

        self._status = OrderStatus.INIT
        self._pancakes: List[Pancake] = []
        self._lock = threading.RLock()

        self.created_at = datetime.utcnow()
        self.updated_at = self.created_at
        self._status_history: List[Tuple[OrderStatus, datetime]] = [
            (OrderStatus.INIT, self.created_at)
        ]

        logger.debug(f"Order created: {self._id}")

    # ========================================================================
    # IDENTITY & VIEWS
    # ========================================================================

    @property
    def id(self) -> uuid.UUID:
        return self._id

    @property
    def building(self) -> int:
        return self._building

    @property
    def room(self) -> int:
        return self._room

    @property
    def status(self) -> OrderStatus:
        return self._status

    @property
    def lock(self) -> threading.RLock:
        """Per-order exclusive lock, released on every exit path via `with`."""
        return self._lock

    @property
    def pancakes(self) -> Tuple[Pancake, ...]:
        """Immutable copy of the pancake list."""
        with self._lock:
            return tuple(self._pancakes)

    def pancake_count(self) -> int:
        with self._lock:
            return len(self._pancakes)

    def total_price(self) -> Decimal:
        """Sum of pancake prices."""
        return sum((p.price for p in self.pancakes), Decimal("0.00"))

    def is_terminal(self) -> bool:
        return not VALID_TRANSITIONS[self._status]

    def get_history(self) -> List[Dict[str, str]]:
        """Get status history."""
        with self._lock:
            return [
                {"status": status.value, "timestamp": ts.isoformat()}
                for status, ts in self._status_history
            ]

    # ========================================================================
    # STATE MACHINE
    # ========================================================================

    def add_pancake(self, pancake: Pancake):
        """
        Append a pancake.

        Raises:
            InvalidArgumentError: If pancake is not a Pancake
            InvalidStateError: If the order is not INIT or is full
        """
        if not isinstance(pancake, Pancake):
            raise InvalidArgumentError(
                f"Expected a Pancake, got {type(pancake).__name__}",
                order_id=self._id
            )

        with self._lock:
            if self._status != OrderStatus.INIT:
                raise InvalidStateError(
                    f"Order already created: {self._id}",
                    order_id=self._id
                )

            if len(self._pancakes) >= self.max_pancakes:
                raise InvalidStateError(
                    f"Order is full ({self.max_pancakes} pancakes): {self._id}",
                    order_id=self._id
                )

            self._pancakes.append(pancake)
            self._touch()

    def place(self):
        """
        Place the order (INIT → CREATED).

        Raises:
            InvalidStateError: If not INIT or no pancakes were added
        """
        with self._lock:
            if self._status != OrderStatus.INIT:
                raise InvalidStateError(
                    f"Order already processed: {self._id}",
                    order_id=self._id
                )
            if not self._pancakes:
                raise InvalidStateError(
                    f"Cannot place an order without pancakes: {self._id}",
                    order_id=self._id
                )
            self._transition(OrderStatus.CREATED)

    def prepare(self):
        """
        Prepare the order (CREATED → PREPARED).

        Raises:
            InvalidStateError: If not CREATED
        """
        with self._lock:
            if self._status != OrderStatus.CREATED:
                raise InvalidStateError(
                    f"Order can only be prepared from CREATED status "
                    f"(current: {self._status.name}): {self._id}",
                    order_id=self._id
                )
            self._transition(OrderStatus.PREPARED)

    def deliver(self):
        """
        Deliver the order (PREPARED → DELIVERED).

        Raises:
            InvalidStateError: If not PREPARED
        """
        with self._lock:
            if self._status != OrderStatus.PREPARED:
                raise InvalidStateError(
                    f"Order can only be delivered from PREPARED status "
                    f"(current: {self._status.name}): {self._id}",
                    order_id=self._id
                )
            self._transition(OrderStatus.DELIVERED)

    def cancel(self):
        """
        Cancel the order (INIT or CREATED → CANCELED).

        Raises:
            InvalidStateError: If already prepared, delivered or canceled
        """
        with self._lock:
            if self._status in (OrderStatus.PREPARED, OrderStatus.DELIVERED):
                raise InvalidStateError(
                    f"Cannot cancel an order that is already delivered or "
                    f"prepared: {self._id}",
                    order_id=self._id
                )
            if self._status == OrderStatus.CANCELED:
                raise InvalidStateError(
                    f"Order already canceled: {self._id}",
                    order_id=self._id
                )
            self._transition(OrderStatus.CANCELED)

    def _transition(self, new_status: OrderStatus):
        # Caller holds self._lock and has checked the guard.
        old_status = self._status
        if new_status not in VALID_TRANSITIONS[old_status]:
            raise InvalidStateError(
                f"Invalid transition: {old_status.value} → {new_status.value}",
                order_id=self._id
            )

        self._status = new_status
        self._touch()
        self._status_history.append((new_status, self.updated_at))

        order_state_transitions.labels(
            from_state=old_status.value,
            to_state=new_status.value
        ).inc()

        logger.info(
            f"Order {self._id}: {old_status.value} → {new_status.value}",
            extra={
                "order_id": str(self._id),
                "from_state": old_status.value,
                "to_state": new_status.value
            }
        )

    def _touch(self):
        self.updated_at = datetime.utcnow()

    # ========================================================================
    # EXPORT
    # ========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """Export to dictionary."""
        with self._lock:
            pancakes = list(self._pancakes)
            status = self._status

        return {
            "order_id": str(self._id),
            "building": self._building,
            "room": self._room,
            "status": status.name,
            "pancakes": [p.to_dict() for p in pancakes],
            "pancake_count": len(pancakes),
            "total": str(sum((p.price for p in pancakes), Decimal("0.00"))),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    def __repr__(self):
        return (
            f"<Order id={self._id} building={self._building} room={self._room} "
            f"pancakes={len(self._pancakes)} status={self._status.name}>"
        )


def validate_building_and_room(building: Any, room: Any):
    """
    Validate delivery location.

    Raises:
        InvalidArgumentError: If building or room is not a positive integer
    """
    if isinstance(building, bool) or not isinstance(building, int) or building <= 0:
        raise InvalidArgumentError(
            f"Building number must be positive. Provided: {building}"
        )
    if isinstance(room, bool) or not isinstance(room, int) or room <= 0:
        raise InvalidArgumentError(
            f"Room number must be positive. Provided: {room}"
        )
