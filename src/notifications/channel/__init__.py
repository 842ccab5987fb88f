"""Channel adapter registry — pluggable out-of-app delivery channels.

Provides singleton access to channel adapters. Uses fake adapters
by default; real adapters (SMTP relay, SMS gateway, push service) are
plugged in with ``set_channel`` at application start-up.
"""

from notifications.notification.notification import DeliveryChannel

_channel_instances: dict[str, object] = {}


def get_channel(channel_type: str):
    """Return the configured channel adapter (singleton per channel type).

    Args:
        channel_type: One of DeliveryChannel enum values ("email", "sms", "push")
    """
    if channel_type not in _channel_instances:
        if channel_type == DeliveryChannel.EMAIL.value:
            from notifications.channel.fake_email import FakeEmailAdapter

            _channel_instances[channel_type] = FakeEmailAdapter()
        elif channel_type == DeliveryChannel.SMS.value:
            from notifications.channel.fake_sms import FakeSMSAdapter

            _channel_instances[channel_type] = FakeSMSAdapter()
        elif channel_type == DeliveryChannel.PUSH.value:
            from notifications.channel.fake_push import FakePushAdapter

            _channel_instances[channel_type] = FakePushAdapter()
        else:
            raise ValueError(f"Unknown channel type: {channel_type}")

    return _channel_instances[channel_type]


def set_channel(channel_type: str, adapter) -> None:
    """Install a specific adapter for a channel."""
    _channel_instances[channel_type] = adapter


def reset_channels():
    """Reset all channel singletons (useful for testing)."""
    _channel_instances.clear()
