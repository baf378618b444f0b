"""Notification aggregate: one push message to one staff member.

Notifications are created from domain events by the fan-out handlers and
delivered by the dispatcher through the push channel.

State Machine:
    PENDING → SENT
    PENDING → FAILED → (retry) → PENDING

A failed attempt schedules the next one with exponential backoff
(``base * 2**attempt`` seconds). A permanent failure, such as a token the
push provider no longer recognizes, is never retried.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from distribution.domain import distribution
from distribution.notification.events import (
    NotificationCreated,
    NotificationFailed,
    NotificationRetried,
    NotificationSent,
)
from distribution.notification.fanout import NotificationEvent


class NotificationChannel(Enum):
    PUSH = "Push"


class NotificationStatus(Enum):
    PENDING = "Pending"
    SENT = "Sent"
    FAILED = "Failed"


_VALID_TRANSITIONS = {
    NotificationStatus.PENDING: {
        NotificationStatus.SENT,
        NotificationStatus.FAILED,
    },
    NotificationStatus.FAILED: {
        NotificationStatus.PENDING,  # Via retry
    },
    NotificationStatus.SENT: set(),  # Terminal
}


@distribution.aggregate
class Notification:
    """A single push notification addressed to a staff member."""

    recipient_id: Identifier(required=True)
    notification_type: String(choices=NotificationEvent, required=True)
    channel: String(choices=NotificationChannel, default=NotificationChannel.PUSH.value)

    # Content
    title: String(max_length=255, required=True)
    body: Text(required=True)
    priority: String(max_length=20, default="normal")
    deep_link: String(max_length=255)
    push_data: Text()  # JSON

    status: String(choices=NotificationStatus, default=NotificationStatus.PENDING.value)

    # Delivery tracking
    message_id: String(max_length=255)
    sent_at: DateTime()
    failure_reason: String(max_length=500)
    permanent_failure: Boolean(default=False)

    # Retry
    retry_count: Integer(default=0)
    max_retries: Integer(default=2)
    next_attempt_at: DateTime()

    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(
        cls,
        recipient_id,
        notification_type,
        title,
        body,
        priority="normal",
        deep_link=None,
        push_data=None,
        max_retries=2,
    ):
        """Create a new notification in PENDING status."""
        now = datetime.now(UTC)

        notification = cls(
            recipient_id=recipient_id,
            notification_type=notification_type,
            channel=NotificationChannel.PUSH.value,
            title=title,
            body=body,
            priority=priority,
            deep_link=deep_link,
            push_data=push_data,
            status=NotificationStatus.PENDING.value,
            retry_count=0,
            max_retries=max_retries,
            created_at=now,
            updated_at=now,
        )

        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                recipient_id=str(recipient_id),
                notification_type=notification_type,
                channel=notification.channel,
                title=title,
                priority=priority,
                created_at=now,
            )
        )

        return notification

    @property
    def retries_exhausted(self) -> bool:
        return self.retry_count > self.max_retries

    @property
    def can_retry(self) -> bool:
        return (
            NotificationStatus(self.status) == NotificationStatus.FAILED
            and not self.permanent_failure
            and not self.retries_exhausted
        )

    def is_due(self, as_of) -> bool:
        if not self.can_retry or self.next_attempt_at is None:
            return False
        due = self.next_attempt_at
        if due.tzinfo is None:
            due = due.replace(tzinfo=UTC)
        if as_of.tzinfo is None:
            as_of = as_of.replace(tzinfo=UTC)
        return due <= as_of

    def _assert_can_transition(self, target_status):
        current = NotificationStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def mark_sent(self, message_id=None):
        """Mark notification as accepted by the push provider."""
        self._assert_can_transition(NotificationStatus.SENT)

        now = datetime.now(UTC)
        self.status = NotificationStatus.SENT.value
        self.message_id = message_id
        self.sent_at = now
        self.next_attempt_at = None
        self.updated_at = now

        self.raise_(
            NotificationSent(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                channel=self.channel,
                message_id=message_id,
                sent_at=now,
            )
        )

    def mark_failed(self, reason, backoff_seconds=1, permanent=False):
        """Record a failed attempt and schedule the next one if any remain."""
        self._assert_can_transition(NotificationStatus.FAILED)

        now = datetime.now(UTC)
        attempt = self.retry_count
        self.status = NotificationStatus.FAILED.value
        self.failure_reason = reason
        self.retry_count = attempt + 1
        self.permanent_failure = bool(permanent)
        self.updated_at = now

        if self.permanent_failure or self.retries_exhausted:
            self.next_attempt_at = None
        else:
            self.next_attempt_at = now + timedelta(seconds=backoff_seconds * 2**attempt)

        self.raise_(
            NotificationFailed(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                channel=self.channel,
                reason=reason,
                retry_count=self.retry_count,
                max_retries=self.max_retries,
                permanent=self.permanent_failure,
                next_attempt_at=self.next_attempt_at,
                failed_at=now,
            )
        )

    def retry(self):
        """Requeue a failed notification for another delivery attempt."""
        if NotificationStatus(self.status) != NotificationStatus.FAILED:
            raise ValidationError({"status": ["Only failed notifications can be retried"]})
        if self.permanent_failure:
            raise ValidationError({"status": ["Notification failed permanently and cannot be retried"]})
        if self.retries_exhausted:
            raise ValidationError({"retry_count": ["Maximum retry attempts exceeded"]})

        now = datetime.now(UTC)
        self.status = NotificationStatus.PENDING.value
        self.failure_reason = None
        self.next_attempt_at = None
        self.updated_at = now

        self.raise_(
            NotificationRetried(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                channel=self.channel,
                retry_count=self.retry_count,
                retried_at=now,
            )
        )
