"""Notify Admins about every StaffMember change."""

from protean.utils.mixins import handle

from distribution.domain import distribution
from distribution.notification.fanout import NotificationEvent
from distribution.notification.helpers import notify_safely
from distribution.notification.notification import Notification
from distribution.staff.events import StaffCreated, StaffDeleted, StaffUpdated


def _staff_data(event) -> dict:
    return {"staff_id": str(event.staff_id), "staff_name": event.name, "role": event.role}


@distribution.event_handler(part_of=Notification, stream_category="distribution::staff_member")
class StaffEventsHandler:
    @handle(StaffCreated)
    def on_staff_created(self, event: StaffCreated) -> None:
        notify_safely(NotificationEvent.STAFF_CREATED, _staff_data(event))

    @handle(StaffUpdated)
    def on_staff_updated(self, event: StaffUpdated) -> None:
        notify_safely(NotificationEvent.STAFF_UPDATED, _staff_data(event))

    @handle(StaffDeleted)
    def on_staff_deleted(self, event: StaffDeleted) -> None:
        notify_safely(NotificationEvent.STAFF_DELETED, _staff_data(event))
