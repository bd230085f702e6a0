"""
Order status lifecycle.

    pending    -> processing, cancelled
    processing -> shipped, cancelled
    shipped    -> delivered
    delivered  -> (terminal)
    cancelled  -> (terminal)

Customers may only cancel from pending/processing. Admin changes are
not restricted by the current state; `check_admin_transition` is the
single place to add such a guard.
"""

from app.core.errors import ValidationError

PENDING = "pending"
PROCESSING = "processing"
SHIPPED = "shipped"
DELIVERED = "delivered"
CANCELLED = "cancelled"

ORDER_STATUSES: tuple[str, ...] = (PENDING, PROCESSING, SHIPPED, DELIVERED, CANCELLED)

TRANSITIONS: dict[str, frozenset[str]] = {
    PENDING: frozenset({PROCESSING, CANCELLED}),
    PROCESSING: frozenset({SHIPPED, CANCELLED}),
    SHIPPED: frozenset({DELIVERED}),
    DELIVERED: frozenset(),
    CANCELLED: frozenset(),
}

CUSTOMER_CANCELLABLE: frozenset[str] = frozenset({PENDING, PROCESSING})


def validate_status(value: str) -> str:
    if value not in ORDER_STATUSES:
        allowed = ", ".join(ORDER_STATUSES)
        raise ValidationError(f"Invalid status '{value}'. Allowed values: {allowed}")
    return value


def is_lifecycle_transition(current: str, target: str) -> bool:
    """True when `target` is a forward step of the lifecycle from `current`."""
    return target in TRANSITIONS.get(current, frozenset())


def check_customer_cancel(current: str) -> None:
    if current not in CUSTOMER_CANCELLABLE:
        raise ValidationError(f"Order cannot be cancelled in status '{current}'")


def check_admin_transition(current: str, target: str) -> None:
    """
    Admin status changes: the target must be a known status, the current
    state is not checked (e.g. delivered -> pending is accepted).
    """
    validate_status(target)
