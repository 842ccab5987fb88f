import pytest


@pytest.fixture(autouse=True)
def _ctx(notifications_bed):
    from notifications.channel import reset_channels
    from notifications.realtime.fanout import reset_fanout
    from notifications.realtime.registry import reset_registry

    reset_channels()
    reset_registry()
    reset_fanout()

    with notifications_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        for _, broker in current_domain.brokers.items():
            broker._data_reset()
        current_domain.event_store.store._data_reset()
