"""ActivateScheduledOrders command + handler.

Invoked by a background job or cron to turn scheduled orders whose
activation time has passed into active ones.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import DateTime
from protean.utils.globals import current_domain

from distribution.domain import distribution
from distribution.order.order import Order
from distribution.order.workflow import LifecycleStatus

logger = structlog.get_logger(__name__)


@distribution.command(part_of="Order")
class ActivateScheduledOrders:
    as_of = DateTime()  # Defaults to now


@distribution.command_handler(part_of=Order)
class ActivateScheduledOrdersHandler:
    @handle(ActivateScheduledOrders)
    def activate_due(self, command):
        as_of = command.as_of or datetime.now(UTC)
        repo = current_domain.repository_for(Order)
        scheduled = repo._dao.query.filter(status=LifecycleStatus.SCHEDULED.value).all().items

        activated = []
        for order in scheduled:
            if order.activate(as_of):
                repo.add(order)
                activated.append(order.order_id)

        logger.info("Scheduled orders activated", count=len(activated), as_of=str(as_of))
        return activated
