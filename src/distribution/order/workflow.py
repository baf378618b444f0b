"""Fulfillment workflow tables and deployment policies.

Two historical lineages of the workflow exist and both are supported:

    strict:      Pending → DC → Invoice → Dispatched
    permissive:  Pending → DC → Invoice → Dispatched, plus DC → Dispatched

Cancelled is reachable from any non-dispatched status, but only through the
cancel command, never through a status change. Dispatched and Cancelled have
no outgoing transitions.

Stock is committed either when the order is created or when it is
dispatched. Whichever policy a deployment selects, every debit and credit is
recorded per item as ``committed_qty`` so restores never double count.
"""

from enum import Enum


class OrderStatus(Enum):
    PENDING = "Pending"
    DC = "DC"
    INVOICE = "Invoice"
    DISPATCHED = "Dispatched"
    CANCELLED = "Cancelled"


class LifecycleStatus(Enum):
    ACTIVE = "active"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TransitionLineage(Enum):
    STRICT = "strict"
    PERMISSIVE = "permissive"


class StockCommitPolicy(Enum):
    AT_CREATION = "creation"
    AT_DISPATCH = "dispatch"


_STRICT_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.DC},
    OrderStatus.DC: {OrderStatus.INVOICE},
    OrderStatus.INVOICE: {OrderStatus.DISPATCHED},
    OrderStatus.DISPATCHED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

_PERMISSIVE_TRANSITIONS = {
    **_STRICT_TRANSITIONS,
    OrderStatus.DC: {OrderStatus.INVOICE, OrderStatus.DISPATCHED},
}

_TRANSITION_TABLES = {
    TransitionLineage.STRICT: _STRICT_TRANSITIONS,
    TransitionLineage.PERMISSIVE: _PERMISSIVE_TRANSITIONS,
}

# Workflow order, used to list allowed targets in a stable order
_STATUS_ORDER = [
    OrderStatus.PENDING,
    OrderStatus.DC,
    OrderStatus.INVOICE,
    OrderStatus.DISPATCHED,
    OrderStatus.CANCELLED,
]


def allowed_transitions(current: OrderStatus, lineage: TransitionLineage) -> list[OrderStatus]:
    """Statuses reachable from ``current`` by a status change, in workflow order."""
    targets = _TRANSITION_TABLES[lineage].get(current, set())
    return [status for status in _STATUS_ORDER if status in targets]


def is_terminal(status: OrderStatus) -> bool:
    return status in (OrderStatus.DISPATCHED, OrderStatus.CANCELLED)
