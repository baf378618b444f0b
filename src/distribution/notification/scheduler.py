"""ProcessDueNotifications command + handler: requeue failed notifications.

Invoked by a background job. Every failed notification whose backoff has
elapsed and that still has attempts left is requeued; the dispatcher then
delivers it.
"""

from datetime import UTC, datetime

import structlog
from protean.fields import DateTime
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from distribution.domain import distribution
from distribution.notification.notification import Notification, NotificationStatus

logger = structlog.get_logger(__name__)

_BATCH_SIZE = 500


@distribution.command(part_of="Notification")
class ProcessDueNotifications:
    """Request to retry all notifications whose next attempt is due."""

    as_of: DateTime()  # Optional: process as of this time (defaults to now)


@distribution.command_handler(part_of=Notification)
class ProcessDueNotificationsHandler:
    @handle(ProcessDueNotifications)
    def process_due(self, command: ProcessDueNotifications):
        as_of = command.as_of or datetime.now(UTC)
        repo = current_domain.repository_for(Notification)

        failed = repo._dao.query.filter(status=NotificationStatus.FAILED.value).limit(_BATCH_SIZE).all().items

        requeued = []
        for notification in failed:
            if not notification.is_due(as_of):
                continue
            notification.retry()
            repo.add(notification)
            requeued.append(str(notification.id))

        logger.info("Due notifications requeued", requeued=len(requeued), as_of=str(as_of))
        return requeued
