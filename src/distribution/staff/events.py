"""Domain events for the StaffMember aggregate."""

from protean.fields import DateTime, Identifier, String

from distribution.domain import distribution


@distribution.event(part_of="StaffMember")
class StaffCreated:
    __version__ = 1

    staff_id = Identifier(required=True)
    name = String(required=True)
    phone = String()
    role = String(required=True)
    actor_id = Identifier()
    actor_name = String()
    actor_role = String()
    created_at = DateTime()


@distribution.event(part_of="StaffMember")
class StaffUpdated:
    __version__ = 1

    staff_id = Identifier(required=True)
    name = String(required=True)
    phone = String()
    role = String(required=True)
    actor_id = Identifier()
    actor_name = String()
    actor_role = String()
    updated_at = DateTime()


@distribution.event(part_of="StaffMember")
class StaffDeleted:
    __version__ = 1

    staff_id = Identifier(required=True)
    name = String(required=True)
    role = String()
    actor_id = Identifier()
    actor_name = String()
    actor_role = String()
    deleted_at = DateTime()
