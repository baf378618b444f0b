"""Broadcast port: abstract interface for pushing live events to connected clients."""

from abc import ABC, abstractmethod

ALL = "all"


class BroadcastPort(ABC):
    """Publishes named events (``order:created``, ``product:updated``…) to an audience."""

    @abstractmethod
    def broadcast(self, event_name: str, payload: dict, audience: str = ALL) -> None:
        """Deliver ``payload`` under ``event_name`` to every observer in ``audience``.

        Delivery is at-least-once with no ordering guarantee across event names.
        """
        ...
