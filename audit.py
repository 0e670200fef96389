"""
Audit Module
============
Structured audit events for order lifecycle transitions.

The ledger emits one AuditEvent per successful transition to an injected
AuditSink. Sinks are append-only and never see the order lock.

Sinks:
- InMemoryAuditSink: thread-safe event list with text rendering
- LoggingAuditSink: forwards events to a structlog logger
"""

import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol
from uuid import UUID

import structlog


logger = logging.getLogger(__name__)


class AuditEventKind(Enum):
    """Lifecycle transitions that produce an audit event."""
    PANCAKE_ADDED = "pancake_added"
    ORDER_PLACED = "order_placed"
    ORDER_PREPARED = "order_prepared"
    ORDER_DELIVERED = "order_delivered"
    ORDER_CANCELED = "order_canceled"


@dataclass(frozen=True)
class AuditEvent:
    """
    Immutable audit record.

    pancake_count is captured at the time of the transition.
    """
    kind: AuditEventKind
    order_id: UUID
    pancake_count: int
    building: int
    room: int
    detail: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["kind"] = self.kind.value
        data["order_id"] = str(self.order_id)
        data["timestamp"] = self.timestamp.isoformat()
        return data

    def render(self) -> str:
        """Render as a single human-readable log line."""
        location = f"for building {self.building}, room {self.room}"

        if self.kind == AuditEventKind.PANCAKE_ADDED:
            return (
                f"Added pancake with description '{self.detail}' "
                f"to order {self.order_id} containing {self.pancake_count} pancakes, "
                f"{location}."
            )
        if self.kind == AuditEventKind.ORDER_CANCELED:
            return (
                f"Cancelled order {self.order_id} with {self.pancake_count} pancake(s) "
                f"{location}."
            )

        suffix = {
            AuditEventKind.ORDER_PLACED: "has been placed",
            AuditEventKind.ORDER_PREPARED: "has been prepared",
            AuditEventKind.ORDER_DELIVERED: "out for delivery",
        }[self.kind]

        return (
            f"Order {self.order_id} with {self.pancake_count} pancake(s) "
            f"{location} {suffix}."
        )


class AuditSink(Protocol):
    """Receives one event per successful lifecycle transition."""

    def emit(self, event: AuditEvent) -> None:
        ...


class InMemoryAuditSink:
    """Thread-safe append-only audit sink held in memory."""

    def __init__(self):
        self._events: List[AuditEvent] = []
        self._lock = threading.Lock()

    def emit(self, event: AuditEvent) -> None:
        with self._lock:
            self._events.append(event)

    def events(self) -> List[AuditEvent]:
        """Get a copy of all events in emission order."""
        with self._lock:
            return list(self._events)

    def events_for(self, order_id: UUID) -> List[AuditEvent]:
        """Get events for one order."""
        return [e for e in self.events() if e.order_id == order_id]

    def render(self) -> str:
        """Render all events as newline-terminated text lines."""
        return "".join(f"{e.render()}\n" for e in self.events())

    def clear(self):
        with self._lock:
            count = len(self._events)
            self._events.clear()
        logger.debug(f"Cleared {count} audit events")

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


class LoggingAuditSink:
    """Audit sink that writes each event to a structured logger."""

    def __init__(self, logger_name: str = "audit"):
        self._logger = structlog.get_logger(logger_name)

    def emit(self, event: AuditEvent) -> None:
        self._logger.info(
            event.kind.value,
            order_id=str(event.order_id),
            pancake_count=event.pancake_count,
            building=event.building,
            room=event.room,
            detail=event.detail,
            message=event.render()
        )
