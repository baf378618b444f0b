"""Channel adapter registry: pluggable notification delivery channels.

Uses the fake push adapter unless a real adapter has been configured at
startup with ``configure_channel``.
"""

from distribution.notification.notification import NotificationChannel

_channel_instances: dict[str, object] = {}


def configure_channel(channel_type: str, adapter) -> None:
    """Install the adapter used for ``channel_type`` (e.g. an FCM client in production)."""
    _channel_instances[channel_type] = adapter


def get_channel(channel_type: str):
    """Return the configured channel adapter (singleton per channel type).

    Args:
        channel_type: One of NotificationChannel enum values
    """
    if channel_type not in _channel_instances:
        if channel_type == NotificationChannel.PUSH.value:
            from distribution.notification.channel.fake_push import FakePushAdapter

            _channel_instances[channel_type] = FakePushAdapter()
        else:
            raise ValueError(f"Unknown channel type: {channel_type}")

    return _channel_instances[channel_type]


def reset_channels():
    """Reset all channel singletons (useful for testing)."""
    _channel_instances.clear()
