"""Actor descriptor carried by every command and event."""

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class Actor:
    id: str
    name: str
    role: str

    @classmethod
    def from_command(cls, command) -> "Actor":
        return cls(
            id=str(command.actor_id),
            name=command.actor_name or "",
            role=command.actor_role or "",
        )

    @classmethod
    def from_event(cls, event) -> "Actor":
        return cls(
            id=str(event.actor_id) if event.actor_id else "",
            name=event.actor_name or "",
            role=event.actor_role or "",
        )

    def to_dict(self) -> dict:
        return asdict(self)


# Stock movements made on behalf of an order are attributed to the system
SYSTEM_ACTOR = Actor(id="system", name="System", role="System")
