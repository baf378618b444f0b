"""StaffMember aggregate: the people who take, progress and stock orders.

Staff members are also the notification directory: a member with a
registered push token is an active delivery target for their role's
audiences.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, String

from distribution.access.policy import Role
from distribution.domain import distribution
from distribution.staff.events import StaffCreated, StaffDeleted, StaffUpdated


@distribution.aggregate
class StaffMember:
    name = String(required=True, max_length=255)
    phone = String(max_length=50)
    role = String(choices=Role, required=True)
    push_token = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, role, actor, phone=None, push_token=None):
        now = datetime.now(UTC)
        member = cls(
            name=name,
            phone=phone,
            role=role,
            push_token=push_token,
            created_at=now,
            updated_at=now,
        )
        member.raise_(
            StaffCreated(
                staff_id=str(member.id),
                name=member.name,
                phone=member.phone,
                role=member.role,
                actor_id=actor.id,
                actor_name=actor.name,
                actor_role=actor.role,
                created_at=now,
            )
        )
        return member

    @property
    def has_push_target(self) -> bool:
        return bool(self.push_token)

    def update_profile(self, actor, name=None, phone=None, role=None):
        if name is not None:
            self.name = name
        if phone is not None:
            self.phone = phone
        if role is not None:
            self.role = role

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            StaffUpdated(
                staff_id=str(self.id),
                name=self.name,
                phone=self.phone,
                role=self.role,
                actor_id=actor.id,
                actor_name=actor.name,
                actor_role=actor.role,
                updated_at=now,
            )
        )

    def register_push_token(self, push_token):
        self.push_token = push_token
        self.updated_at = datetime.now(UTC)

    def clear_push_token(self):
        self.push_token = None
        self.updated_at = datetime.now(UTC)

    def mark_deleted(self, actor):
        self.raise_(
            StaffDeleted(
                staff_id=str(self.id),
                name=self.name,
                role=self.role,
                actor_id=actor.id,
                actor_name=actor.name,
                actor_role=actor.role,
                deleted_at=datetime.now(UTC),
            )
        )
