import pytest

# Registers the relay handler before the Quality domain is initialized
import review_relay


def _reset(domain):
    for _, provider in domain.providers.items():
        provider._data_reset()
    for _, broker in domain.brokers.items():
        broker._data_reset()
    domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def _ctx(quality_bed, notifications_bed):
    from notifications.channel import reset_channels
    from notifications.realtime.fanout import reset_fanout
    from notifications.realtime.registry import reset_registry
    from quality.check.locking import check_guard
    from quality.scoring.runner import reset_runner

    reset_channels()
    reset_registry()
    reset_fanout()
    review_relay.enable()

    with quality_bed.domain_context():
        yield

    review_relay.disable()
    with notifications_bed.domain_context():
        from protean import current_domain

        _reset(current_domain)
    with quality_bed.domain_context():
        from protean import current_domain

        _reset(current_domain)
    check_guard.reset()
    reset_runner()
