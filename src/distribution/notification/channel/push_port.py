"""Push notification channel port: abstract interface for push delivery."""

from abc import ABC, abstractmethod

# Error code an adapter reports when the device token is no longer registered
INVALID_TOKEN = "invalid-token"


class PushPort(ABC):
    """Abstract interface for push notification delivery adapters."""

    @abstractmethod
    def send(
        self,
        device_token: str,
        title: str,
        body: str,
        data: dict | None = None,
        priority: str = "normal",
    ) -> dict:
        """Send a push notification.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error
            (optional) and error_code (``INVALID_TOKEN`` when the token must
            be discarded)
        """
        ...
