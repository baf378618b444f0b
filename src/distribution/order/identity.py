"""Sequential order identifiers: ORD-001, ORD-002, …

The next identifier is derived from the highest existing one, so the counter
is best-effort: two orders created concurrently can read the same maximum.
Order ids are the aggregate identity, which makes the second insert collide
rather than silently share an id, but it is still not a gap-free sequence.
A deployment with concurrent order intake needs an atomic counter here.
"""

import re

from protean.utils.globals import current_domain

from distribution.order.order import Order

_MIN_DIGITS = 3


def format_order_id(prefix: str, sequence: int) -> str:
    return f"{prefix}-{sequence:0{_MIN_DIGITS}d}"


def parse_sequence(order_id, prefix: str) -> int | None:
    """Numeric suffix of ``PREFIX-NNN``, or None when the id is malformed."""
    match = re.fullmatch(rf"{re.escape(prefix)}-(\d+)", str(order_id or ""))
    return int(match.group(1)) if match else None


def next_order_id(prefix: str) -> tuple[str, int]:
    """Return ``(order_id, sequence)`` for the next order.

    Falls back to 1 when there are no orders yet or the latest id cannot be
    parsed.
    """
    latest = current_domain.repository_for(Order)._dao.query.order_by("-sequence").limit(1).all().items
    previous = parse_sequence(latest[0].order_id, prefix) if latest else None
    sequence = previous + 1 if previous is not None else 1
    return format_order_id(prefix, sequence), sequence
