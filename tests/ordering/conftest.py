import pytest
from protean.integrations.pytest import DomainFixture
from shared.access import Caller, Role


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session", autouse=True)
def setup_db(ordering_bed):
    from ordering.domain import ordering
    from ordering.utils.db import drop_db, setup_db

    setup_db(ordering)

    yield

    drop_db(ordering)


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()

        for _, broker in current_domain.brokers.items():
            broker._data_reset()


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------
@pytest.fixture()
def catalog():
    """Fake catalog seeded with two farms' produce."""
    from ordering.catalog import get_catalog

    fake = get_catalog()
    fake.register_product("maize", farm_id="farm-a", unit_price=10.0, available_quantity=50, name="White maize")
    fake.register_product("cassava", farm_id="farm-a", unit_price=4.5, available_quantity=30, name="Cassava")
    fake.register_product("tomato", farm_id="farm-b", unit_price=2.25, available_quantity=100, name="Tomatoes")
    fake.register_product("okra", farm_id="farm-b", unit_price=3.0, available_quantity=5, name="Okra")
    return fake


@pytest.fixture()
def relay():
    from ordering.relay import get_relay

    return get_relay()


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------
@pytest.fixture()
def cart_store(catalog):
    from ordering.cart.store import CartStore

    return CartStore()


@pytest.fixture()
def order_store(catalog):
    from ordering.order.store import OrderStore

    return OrderStore()


@pytest.fixture()
def engine(catalog):
    from ordering.checkout.engine import OrderLifecycleEngine

    return OrderLifecycleEngine()


# ---------------------------------------------------------------------------
# Callers
# ---------------------------------------------------------------------------
@pytest.fixture()
def buyer():
    return Caller(actor_id="buyer-001", role=Role.BUYER)


@pytest.fixture()
def farmer_a():
    return Caller(actor_id="farmer-a", role=Role.FARMER, farm_id="farm-a")


@pytest.fixture()
def farmer_b():
    return Caller(actor_id="farmer-b", role=Role.FARMER, farm_id="farm-b")


@pytest.fixture()
def admin():
    return Caller(actor_id="admin-001", role=Role.ADMIN)
