"""
Order State Machine (Domain Logic).

Pure transition policy and update-payload sanitation. No I/O.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from backend.app.models.order_enums import OrderStatus, TERMINAL_STATUSES
from backend.app.core.exceptions import (
    InvalidTransitionError,
    OrderValidationError,
    TerminalOrderImmutableError,
)

logger = logging.getLogger("dispatch.orders")


# Fields a client may write through the update path.
WRITABLE_FIELDS = frozenset({
    "campaign", "city", "contact_name", "phone", "order_type",
    "client_name", "address", "date_meeting", "equipment_type", "problem",
    "status", "master_id", "settlement", "expense",
    "receipt_doc", "expense_doc",
})

# Null means "clear the column" for these.
CLEARABLE_FIELDS = frozenset({"settlement", "expense", "master_id"})

# Intake fields that may never be blank.
REQUIRED_INTAKE_FIELDS = frozenset({
    "city", "phone", "client_name", "address", "date_meeting", "problem",
})

# From MODERN the order can only stay put or resolve.
MODERN_DESTINATIONS = frozenset({
    OrderStatus.MODERN,
    OrderStatus.DONE,
    OrderStatus.REFUSED,
    OrderStatus.NOT_ORDERED,
})


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def allowed_destinations(current: OrderStatus) -> frozenset:
    """Statuses reachable from ``current`` (empty for terminal ones)."""
    if current in TERMINAL_STATUSES:
        return frozenset()
    if current == OrderStatus.MODERN:
        return MODERN_DESTINATIONS
    return frozenset(OrderStatus)


def ensure_mutable(order_id: int, current: OrderStatus) -> None:
    """
    Reject any edit of a closed order.

    Raises:
        TerminalOrderImmutableError: if ``current`` is terminal
    """
    if current in TERMINAL_STATUSES:
        raise TerminalOrderImmutableError(order_id, current.value)


def check_transition(current: OrderStatus, target: OrderStatus) -> None:
    """
    Validate a status change.

    Raises:
        InvalidTransitionError: if ``target`` is not reachable from ``current``
    """
    if target not in allowed_destinations(current):
        raise InvalidTransitionError(current.value, target.value)


def closing_timestamp(
    current_closed_at: Optional[datetime],
    target: Optional[OrderStatus],
    now: datetime,
) -> Optional[datetime]:
    """
    ``closed_at`` to persist for a change into ``target``.

    Returns ``now`` the first time the order enters a terminal status, None
    when nothing should be written (not terminal, or already stamped).
    """
    if target is None or target not in TERMINAL_STATUSES:
        return None
    if current_closed_at is not None:
        return None
    return now


def sanitize_changes(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Keep only writable fields of an update payload.

    Non-whitelisted keys are dropped silently. ``None`` clears the clearable
    numeric/assignment fields and is ignored for every other field.

    Raises:
        OrderValidationError: if nothing writable is left, or a required
            intake field is being blanked
    """
    changes: Dict[str, Any] = {}
    dropped = []

    for field, value in payload.items():
        if field not in WRITABLE_FIELDS:
            dropped.append(field)
            continue
        if value is None and field not in CLEARABLE_FIELDS:
            continue
        if field in REQUIRED_INTAKE_FIELDS and isinstance(value, str) and not value.strip():
            raise OrderValidationError(
                f"Field '{field}' cannot be empty",
                details={"field": field}
            )
        changes[field] = value

    if dropped:
        logger.debug("Dropped non-writable fields: %s", sorted(dropped))

    if "status" in changes and not isinstance(changes["status"], OrderStatus):
        try:
            changes["status"] = OrderStatus(changes["status"])
        except ValueError:
            raise OrderValidationError(
                f"Unknown order status '{changes['status']}'",
                details={"field": "status"}
            )

    if not changes:
        raise OrderValidationError("No updatable fields in request")

    return changes
