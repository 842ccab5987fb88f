import pytest


@pytest.fixture(autouse=True)
def _ctx(quality_bed):
    from quality.check.locking import check_guard
    from quality.scoring.runner import reset_runner

    with quality_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        for _, broker in current_domain.brokers.items():
            broker._data_reset()
        current_domain.event_store.store._data_reset()

    check_guard.reset()
    reset_runner()
