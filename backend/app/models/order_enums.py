"""
Order status enumeration and lifecycle constants.
"""

import enum


class OrderStatus(str, enum.Enum):
    """
    Order status enumeration.

    Status flow:
        PENDING, ACCEPTED, IN_PROGRESS freely move between each other
        MODERN may only stay MODERN or resolve to a terminal status
        DONE, REFUSED, NOT_ORDERED are terminal (order becomes read-only)
    """
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    IN_PROGRESS = "InProgress"
    MODERN = "Modern"
    DONE = "Done"
    REFUSED = "Refused"
    NOT_ORDERED = "NotOrdered"


TERMINAL_STATUSES = frozenset({
    OrderStatus.DONE,
    OrderStatus.REFUSED,
    OrderStatus.NOT_ORDERED,
})

# Queue display priority, lower comes first
STATUS_PRIORITY = {
    OrderStatus.PENDING.value: 1,
    OrderStatus.ACCEPTED.value: 2,
    OrderStatus.IN_PROGRESS.value: 3,
    OrderStatus.MODERN.value: 4,
    OrderStatus.DONE.value: 5,
    OrderStatus.REFUSED.value: 6,
    OrderStatus.NOT_ORDERED.value: 7,
}
UNKNOWN_STATUS_PRIORITY = 999
