import os

import pytest


@pytest.fixture(scope="session")
def _lockers_domain(request):
    """Initialize the lockers domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from lockers.domain import lockers

    lockers.init()
    return lockers


@pytest.fixture(scope="session", autouse=True)
def setup_db(_lockers_domain):
    from lockers.utils.db import drop_db, setup_db

    setup_db(_lockers_domain)

    yield

    drop_db(_lockers_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_lockers_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _lockers_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


@pytest.fixture(autouse=True)
def _default_policies(monkeypatch):
    """Each test starts from the default runtime knobs."""
    monkeypatch.delenv("HEARTBEAT_FRESHNESS_SECONDS", raising=False)
    monkeypatch.delenv("COURIER_STICKY_INACTIVE", raising=False)
