"""Broadcaster registry: the live event sink handed to event handlers.

The sink has an explicit lifecycle: the application configures one at
startup and handlers fetch it with ``get_broadcaster``. Asking for it before
it is configured is a configuration error.
"""

from protean.exceptions import ConfigurationError

from distribution.realtime.port import BroadcastPort

_broadcaster: BroadcastPort | None = None


def configure_broadcaster(broadcaster: BroadcastPort) -> BroadcastPort:
    global _broadcaster
    _broadcaster = broadcaster
    return broadcaster


def get_broadcaster() -> BroadcastPort:
    if _broadcaster is None:
        raise ConfigurationError("Broadcaster is not configured; call configure_broadcaster() at startup")
    return _broadcaster


def reset_broadcaster():
    """Forget the configured broadcaster (useful for testing)."""
    global _broadcaster
    _broadcaster = None
