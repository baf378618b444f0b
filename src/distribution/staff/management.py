"""Staff management: commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from distribution.access.actor import Actor
from distribution.domain import distribution
from distribution.staff.staff import StaffMember


@distribution.command(part_of="StaffMember")
class CreateStaff:
    name = String(required=True, max_length=255)
    phone = String(max_length=50)
    role = String(required=True, max_length=50)
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command(part_of="StaffMember")
class UpdateStaff:
    staff_id = Identifier(required=True)
    name = String(max_length=255)
    phone = String(max_length=50)
    role = String(max_length=50)
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command(part_of="StaffMember")
class DeleteStaff:
    staff_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_name = String(max_length=255)
    actor_role = String(max_length=50)


@distribution.command(part_of="StaffMember")
class RegisterPushToken:
    """Record the device endpoint push notifications are delivered to."""

    staff_id = Identifier(required=True)
    push_token = String(required=True, max_length=500)


@distribution.command(part_of="StaffMember")
class ClearPushToken:
    staff_id = Identifier(required=True)


@distribution.command_handler(part_of=StaffMember)
class ManageStaffHandler:
    @handle(CreateStaff)
    def create_staff(self, command):
        member = StaffMember.create(
            name=command.name,
            role=command.role,
            actor=Actor.from_command(command),
            phone=command.phone,
        )
        current_domain.repository_for(StaffMember).add(member)
        return str(member.id)

    @handle(UpdateStaff)
    def update_staff(self, command):
        repo = current_domain.repository_for(StaffMember)
        member = repo.get(command.staff_id)
        member.update_profile(
            Actor.from_command(command),
            name=command.name,
            phone=command.phone,
            role=command.role,
        )
        repo.add(member)

    @handle(DeleteStaff)
    def delete_staff(self, command):
        repo = current_domain.repository_for(StaffMember)
        member = repo.get(command.staff_id)
        member.mark_deleted(Actor.from_command(command))
        repo.add(member)
        repo._dao.delete(member)

    @handle(RegisterPushToken)
    def register_push_token(self, command):
        repo = current_domain.repository_for(StaffMember)
        member = repo.get(command.staff_id)
        member.register_push_token(command.push_token)
        repo.add(member)

    @handle(ClearPushToken)
    def clear_push_token(self, command):
        repo = current_domain.repository_for(StaffMember)
        member = repo.get(command.staff_id)
        member.clear_push_token()
        repo.add(member)
