import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the configuration environment before any domain is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env
    # Tests assert on recorded events instead of reading the broker
    os.environ.setdefault("RELAY_ADAPTER", "fake")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path or "/analytics/" in test_path or "/shared/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def reset_adapters():
    """Give every test fresh adapter singletons."""
    from ordering.cart.cache import reset_cart_cache
    from ordering.catalog import reset_catalog
    from ordering.relay import reset_relay

    reset_catalog()
    reset_relay()
    reset_cart_cache()

    yield

    reset_catalog()
    reset_relay()
    reset_cart_cache()
