"""Shared helpers for notification event handlers.

The common pattern: read the staff directory → resolve recipients with the
fan-out policy → build the payload → create one Notification per recipient.
"""

import json

import structlog
from protean.utils.globals import current_domain

from distribution.notification.fanout import NotificationEvent, recipients_for
from distribution.notification.notification import Notification
from distribution.notification.payloads import payload_for
from distribution.settings import current_settings
from distribution.staff.staff import StaffMember

logger = structlog.get_logger(__name__)

# Upper bound on staff records scanned per fan-out
DIRECTORY_LIMIT = 1000


def staff_directory() -> list[StaffMember]:
    repo = current_domain.repository_for(StaffMember)
    return repo._dao.query.limit(DIRECTORY_LIMIT).all().items


def send_notification(event_type: NotificationEvent, data: dict, context: dict | None = None) -> list[str]:
    """Create notifications for everyone in the event's audience.

    Args:
        event_type: the notification type
        data: values rendered into the payload
        context: recipient hints (assignee, previous assignee, creator ids);
            merged over ``data``

    Returns:
        List of notification IDs created.
    """
    event_type = NotificationEvent(event_type)
    recipients = recipients_for(event_type, {**data, **(context or {})}, staff_directory())
    if not recipients:
        logger.info("No recipients for notification", notification_type=event_type.value)
        return []

    payload = payload_for(event_type, data)
    max_retries = current_settings().notification_max_retries
    repo = current_domain.repository_for(Notification)

    notification_ids = []
    for recipient_id in recipients:
        notification = Notification.create(
            recipient_id=recipient_id,
            notification_type=event_type.value,
            title=payload["title"],
            body=payload["body"],
            priority=payload["priority"],
            deep_link=payload["deep_link"],
            push_data=json.dumps(payload["data"]),
            max_retries=max_retries,
        )
        repo.add(notification)
        notification_ids.append(str(notification.id))

    logger.info(
        "Notifications created",
        notification_type=event_type.value,
        count=len(notification_ids),
    )
    return notification_ids


def notify_safely(event_type: NotificationEvent, data: dict, context: dict | None = None) -> list[str]:
    """``send_notification`` that logs and swallows every failure."""
    try:
        return send_notification(event_type, data, context)
    except Exception as exc:
        logger.error(
            "Failed to create notifications",
            notification_type=NotificationEvent(event_type).value,
            error=str(exc),
        )
        return []
