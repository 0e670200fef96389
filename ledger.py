"""
Order Ledger (Production)
=========================
Central orchestration for the pancake order lifecycle.

Responsibilities:
- Own the pending index, the all-orders index and the placed, prepared
  and delivered queues
- Move orders between containers (the only component allowed to)
- Hold each order's lock around its check-then-transition sequence
- Emit one audit event per successful transition

Concurrency:
- Containers are individually thread-safe; a move between containers is
  a sequence of atomic steps, not one atomic step
- Audit events are built and emitted under the order lock, before the
  order is handed to its next container, so per-order emission order
  matches transition order
- A slow audit sink delays other operations on the same order only
"""

from decimal import Decimal
from typing import Mapping, Optional, Tuple
from uuid import UUID

import structlog
from prometheus_client import Counter, Gauge

from audit import AuditEvent, AuditEventKind, AuditSink, InMemoryAuditSink, LoggingAuditSink
from config import Config, get_config
from errors import InvalidArgumentError, InvalidStateError, OrderNotFoundError
from order import DEFAULT_MAX_PANCAKES, Order, OrderStatus
from pancake import Pancake
from queues import OrderIndex, OrderQueue

# Structured logging
logger = structlog.get_logger(__name__)


# ============================================================================
# METRICS
# ============================================================================

ledger_transitions = Counter(
    'pancake_order_transitions_total',
    'Successful ledger transitions',
    ['transition']
)
ledger_failures = Counter(
    'pancake_order_failures_total',
    'Rejected ledger operations',
    ['operation', 'reason']
)
orders_queued = Gauge(
    'pancake_orders_queued',
    'Orders currently held per container',
    ['queue']
)


class OrderLedger:
    """
    Order ledger - the system's sole mutation surface.

    This class:
    - Creates orders and tracks them while pending
    - Advances placed/prepared queues strictly FIFO, one order per call
    - Cancels orders that are pending or placed

    This class does NOT:
    - Set order status directly (Order's transition methods do)
    - Price pancakes (the catalog does)
    - Render audit text (the sink does)
    """

    def __init__(
        self,
        audit_sink: Optional[AuditSink] = None,
        restore_on_failed_place: bool = True,
        max_pancakes_per_order: int = DEFAULT_MAX_PANCAKES
    ):
        # Injected collaborator
        self.audit_sink = audit_sink if audit_sink is not None else InMemoryAuditSink()

        self.restore_on_failed_place = restore_on_failed_place
        self.max_pancakes_per_order = max_pancakes_per_order

        # Containers
        self._pending = OrderIndex("pending")
        self._all_orders = OrderIndex("all")
        self._placed = OrderQueue("placed")
        self._prepared = OrderQueue("prepared")
        self._delivered = OrderQueue("delivered")

        logger.info(
            "order_ledger_created",
            restore_on_failed_place=restore_on_failed_place,
            audit_sink=type(self.audit_sink).__name__
        )

    # ========================================================================
    # LIFECYCLE OPERATIONS
    # ========================================================================

    def create_order(self, building: int, room: int) -> Order:
        """
        Create a new order in INIT status and track it as pending.

        Raises:
            InvalidArgumentError: If building or room is not positive
        """
        try:
            order = Order(building, room, max_pancakes=self.max_pancakes_per_order)
        except InvalidArgumentError:
            ledger_failures.labels(operation='create', reason='invalid_argument').inc()
            raise

        self._pending.put(order)
        self._update_gauges()

        logger.info(
            "order_created",
            order_id=str(order.id),
            building=building,
            room=room
        )

        return order

    def add_pancake_to_order(self, order_id: UUID, pancake: Pancake) -> Order:
        """
        Add a pancake to a pending order.

        Raises:
            OrderNotFoundError: If the order is not pending (never existed or already placed)
            InvalidStateError: If the order no longer accepts pancakes
        """
        order = self._pending.get(order_id)
        if order is None:
            ledger_failures.labels(operation='add_pancake', reason='not_found').inc()
            raise OrderNotFoundError(
                f"Order not found or already placed: {order_id}",
                order_id=order_id
            )

        try:
            with order.lock:
                order.add_pancake(pancake)
                event = self._build_event(
                    order,
                    AuditEventKind.PANCAKE_ADDED,
                    detail=pancake.describe()
                )
                self._emit(event)
        except InvalidStateError:
            ledger_failures.labels(operation='add_pancake', reason='invalid_state').inc()
            raise

        return order

    def place_order(self, order_id: UUID) -> Order:
        """
        Place a pending order: pending index → all-orders index + placed queue.

        Raises:
            OrderNotFoundError: If the order is not pending
            InvalidStateError: If the order has no pancakes
        """
        order = self._pending.pop(order_id)
        if order is None:
            ledger_failures.labels(operation='place', reason='not_found').inc()
            raise OrderNotFoundError(
                f"Order not found or already placed: {order_id}",
                order_id=order_id
            )

        try:
            with order.lock:
                if order.pancake_count() == 0:
                    raise InvalidStateError(
                        f"Cannot place an order without pancakes: {order_id}",
                        order_id=order_id
                    )
                order.place()
                event = self._build_event(order, AuditEventKind.ORDER_PLACED)
                self._emit(event)
        except InvalidStateError:
            ledger_failures.labels(operation='place', reason='invalid_state').inc()
            if self.restore_on_failed_place and order.status == OrderStatus.INIT:
                self._pending.put(order)
                logger.warning("order_place_failed_restored", order_id=str(order_id))
            else:
                logger.warning("order_place_failed_dropped", order_id=str(order_id))
            raise

        # Index first so a concurrent cancel that finds it queued can resolve it
        self._all_orders.put(order)
        self._placed.append(order)
        self._update_gauges()

        return order

    def prepare_order(self) -> Optional[Order]:
        """
        Prepare the order at the head of the placed queue.

        Returns:
            The prepared order, or None if there was nothing to prepare

        Raises:
            InvalidStateError: If the head order is not CREATED
        """
        order = self._placed.popleft()
        if order is None:
            logger.debug("no_orders_to_prepare")
            return None

        try:
            with order.lock:
                if order.status != OrderStatus.CREATED:
                    raise InvalidStateError(
                        f"Order is not in a valid state for preparation: {order.id}",
                        order_id=order.id
                    )
                order.prepare()
                event = self._build_event(order, AuditEventKind.ORDER_PREPARED)
                self._emit(event)
        except InvalidStateError:
            ledger_failures.labels(operation='prepare', reason='invalid_state').inc()
            raise

        self._prepared.append(order)
        self._update_gauges()

        return order

    def deliver_order(self) -> Optional[Order]:
        """
        Deliver the order at the head of the prepared queue.

        Returns:
            The delivered order, or None if there was nothing to deliver

        Raises:
            InvalidStateError: If the head order is not PREPARED
        """
        order = self._prepared.popleft()
        if order is None:
            logger.debug("no_orders_to_deliver")
            return None

        try:
            with order.lock:
                if order.status != OrderStatus.PREPARED:
                    raise InvalidStateError(
                        f"Order is not in a valid state for delivery: {order.id}",
                        order_id=order.id
                    )
                order.deliver()
                event = self._build_event(order, AuditEventKind.ORDER_DELIVERED)
                self._emit(event)
        except InvalidStateError:
            ledger_failures.labels(operation='deliver', reason='invalid_state').inc()
            raise

        self._delivered.append(order)
        self._update_gauges()

        return order

    def cancel_order(self, order_id: UUID) -> Order:
        """
        Cancel a pending or placed order.

        Prepared and delivered orders are never cancelable.

        Raises:
            InvalidStateError: If the order is neither pending nor placed
        """
        order = self._pending.pop(order_id)

        if order is None:
            queued = self._placed.remove(order_id)
            if queued is not None:
                order = self._all_orders.get(order_id) or queued

        if order is None:
            ledger_failures.labels(operation='cancel', reason='invalid_state').inc()
            raise InvalidStateError(
                f"Order cannot be canceled in its current state: {order_id}",
                order_id=order_id
            )

        with order.lock:
            order.cancel()
            event = self._build_event(order, AuditEventKind.ORDER_CANCELED)
            self._emit(event)

        self._update_gauges()
        return order

    # ========================================================================
    # SNAPSHOTS
    # ========================================================================

    def pending_orders(self) -> Mapping[UUID, Order]:
        """Read-only copy of the pending index."""
        return self._pending.snapshot()

    def all_orders(self) -> Mapping[UUID, Order]:
        """Read-only copy of every order ever placed."""
        return self._all_orders.snapshot()

    def placed_orders(self) -> Tuple[Order, ...]:
        return self._placed.snapshot()

    def prepared_orders(self) -> Tuple[Order, ...]:
        return self._prepared.snapshot()

    def delivered_orders(self) -> Tuple[Order, ...]:
        return self._delivered.snapshot()

    def find_order(self, order_id: UUID) -> Optional[Order]:
        """Look an order up in the pending index, then the all-orders index."""
        return self._pending.get(order_id) or self._all_orders.get(order_id)

    def get_stats(self) -> dict:
        """Container sizes and revenue of delivered orders."""
        delivered = self._delivered.snapshot()
        return {
            "pending": len(self._pending),
            "placed": len(self._placed),
            "prepared": len(self._prepared),
            "delivered": len(delivered),
            "all_orders": len(self._all_orders),
            "delivered_revenue": str(
                sum((o.total_price() for o in delivered), Decimal("0.00"))
            ),
        }

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _build_event(
        self,
        order: Order,
        kind: AuditEventKind,
        detail: Optional[str] = None
    ) -> AuditEvent:
        # Called under the order lock so the pancake count matches the transition.
        return AuditEvent(
            kind=kind,
            order_id=order.id,
            pancake_count=order.pancake_count(),
            building=order.building,
            room=order.room,
            detail=detail
        )

    def _emit(self, event: AuditEvent):
        ledger_transitions.labels(transition=event.kind.value).inc()

        logger.info(
            event.kind.value,
            order_id=str(event.order_id),
            pancake_count=event.pancake_count
        )

        try:
            self.audit_sink.emit(event)
        except Exception as e:
            # Transition already applied; report, do not raise.
            ledger_failures.labels(operation='audit', reason='sink_error').inc()
            logger.error(
                "audit_emit_failed",
                order_id=str(event.order_id),
                kind=event.kind.value,
                error=str(e),
                exc_info=True
            )

    def _update_gauges(self):
        orders_queued.labels(queue='pending').set(len(self._pending))
        orders_queued.labels(queue='placed').set(len(self._placed))
        orders_queued.labels(queue='prepared').set(len(self._prepared))
        orders_queued.labels(queue='delivered').set(len(self._delivered))


# ============================================================================
# FACTORY
# ============================================================================

def create_ledger(config: Optional[Config] = None) -> OrderLedger:
    """Build a ledger from configuration."""
    config = config or get_config()
    ledger_config = config.ledger

    if ledger_config.audit_sink == "log":
        sink = LoggingAuditSink()
    else:
        sink = InMemoryAuditSink()

    return OrderLedger(
        audit_sink=sink,
        restore_on_failed_place=ledger_config.restore_on_failed_place,
        max_pancakes_per_order=ledger_config.max_pancakes_per_order
    )
