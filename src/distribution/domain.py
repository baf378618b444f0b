"""Distribution bounded context: Orders, Stock and Staff Notifications.

Staff create customer orders and move them through the fulfillment workflow
(Pending → DC → Invoice → Dispatched). Products carry a single stock counter
that is debited and credited as orders are committed, dispatched, cancelled
or deleted. Every change is broadcast to connected observers and fanned out
as push notifications to role-scoped staff audiences.
"""

import structlog
from protean.domain import Domain

distribution = Domain(name="distribution")

logger = structlog.get_logger(__name__)
