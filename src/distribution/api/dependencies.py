"""Request-scoped actor resolution and authorization gates.

Identity is verified upstream; the gateway forwards the authenticated user
as ``X-Actor-Id``, ``X-Actor-Name`` and ``X-Actor-Role`` headers.
"""

from fastapi import Depends, Header, HTTPException

from distribution.access.actor import Actor
from distribution.access.policy import Action, can_access_order, can_perform
from distribution.utils.logging import bind_actor


def current_actor(
    x_actor_id: str = Header(default=""),
    x_actor_name: str = Header(default=""),
    x_actor_role: str = Header(default=""),
) -> Actor:
    if not x_actor_id or not x_actor_role:
        raise HTTPException(status_code=401, detail="Missing actor headers")

    actor = Actor(id=x_actor_id, name=x_actor_name, role=x_actor_role)
    bind_actor(actor)
    return actor


def require(action: Action):
    """Dependency factory: the actor, provided their role grants ``action``."""

    def dependency(actor: Actor = Depends(current_actor)) -> Actor:
        if not can_perform(actor, action):
            raise HTTPException(status_code=403, detail=f"Role '{actor.role}' is not allowed to {action.value}")
        return actor

    return dependency


def ensure_order_access(actor: Actor, order) -> None:
    if not can_access_order(actor, order):
        raise HTTPException(status_code=403, detail="You can only access your own orders")


def actor_fields(actor: Actor) -> dict:
    """Actor descriptor as command keyword arguments."""
    return {"actor_id": actor.id, "actor_name": actor.name, "actor_role": actor.role}
