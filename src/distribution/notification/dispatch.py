"""Internal dispatch handler: delivers notifications through the push channel.

Reacts to NotificationCreated and NotificationRetried. The recipient's
current push token is looked up at delivery time, so a token registered
after the notification was created is still used. A token the provider
rejects as unregistered is cleared from the staff record and the
notification fails permanently.
"""

import json

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from distribution.domain import distribution
from distribution.notification.channel import get_channel
from distribution.notification.channel.push_port import INVALID_TOKEN
from distribution.notification.events import NotificationCreated, NotificationRetried
from distribution.notification.notification import Notification, NotificationStatus
from distribution.settings import current_settings
from distribution.staff.staff import StaffMember

logger = structlog.get_logger(__name__)


@distribution.event_handler(part_of=Notification)
class NotificationDispatcher:
    """Delivers pending notifications as soon as they are queued."""

    @handle(NotificationCreated)
    def on_notification_created(self, event: NotificationCreated) -> None:
        self._dispatch(event.notification_id)

    @handle(NotificationRetried)
    def on_notification_retried(self, event: NotificationRetried) -> None:
        self._dispatch(event.notification_id)

    def _dispatch(self, notification_id) -> None:
        repo = current_domain.repository_for(Notification)

        try:
            notification = repo.get(notification_id)
        except ObjectNotFoundError:
            logger.error("Failed to load notification for dispatch", notification_id=str(notification_id))
            return

        if NotificationStatus(notification.status) != NotificationStatus.PENDING:
            logger.info(
                "Notification not in PENDING status, skipping dispatch",
                notification_id=str(notification_id),
                status=notification.status,
            )
            return

        deliver(notification)
        repo.add(notification)


def deliver(notification: Notification) -> None:
    """Attempt one delivery and record the outcome on ``notification``."""
    staff_repo = current_domain.repository_for(StaffMember)
    try:
        member = staff_repo.get(notification.recipient_id)
    except ObjectNotFoundError:
        member = None

    if member is None or not member.push_token:
        notification.mark_failed("Recipient has no registered push token", permanent=True)
        return

    try:
        adapter = get_channel(notification.channel)
        result = adapter.send(
            device_token=member.push_token,
            title=notification.title,
            body=notification.body,
            data=json.loads(notification.push_data or "{}"),
            priority=notification.priority,
        )
    except Exception as e:
        logger.error("Notification dispatch failed", notification_id=str(notification.id), error=str(e))
        result = {"status": "failed", "error": str(e)}

    if result.get("status") == "sent":
        notification.mark_sent(result.get("message_id"))
        return

    reason = result.get("error") or "Unknown dispatch error"
    if result.get("error_code") == INVALID_TOKEN:
        member.clear_push_token()
        staff_repo.add(member)
        notification.mark_failed(reason, permanent=True)
        logger.warning("Cleared invalid push token", staff_id=str(member.id))
        return

    notification.mark_failed(reason, backoff_seconds=current_settings().notification_backoff_seconds)
    logger.info(
        "Notification delivery failed",
        notification_id=str(notification.id),
        retry_count=notification.retry_count,
        next_attempt_at=str(notification.next_attempt_at),
    )
