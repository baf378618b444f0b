"""Domain events for the Notification aggregate."""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from distribution.domain import distribution


@distribution.event(part_of="Notification")
class NotificationCreated:
    """A notification was created and queued for delivery."""

    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    notification_type: String(required=True)
    channel: String(required=True)
    title: String()
    priority: String()
    created_at: DateTime(required=True)


@distribution.event(part_of="Notification")
class NotificationSent:
    """A notification was accepted by the channel adapter."""

    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    channel: String(required=True)
    message_id: String()
    sent_at: DateTime(required=True)


@distribution.event(part_of="Notification")
class NotificationFailed:
    """A delivery attempt failed."""

    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    channel: String(required=True)
    reason: String(required=True)
    retry_count: Integer(required=True)
    max_retries: Integer(required=True)
    permanent: Boolean(default=False)
    next_attempt_at: DateTime()
    failed_at: DateTime(required=True)


@distribution.event(part_of="Notification")
class NotificationRetried:
    """A failed notification was requeued for another delivery attempt."""

    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    channel: String(required=True)
    retry_count: Integer(required=True)
    retried_at: DateTime(required=True)
