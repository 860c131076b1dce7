import os
from pathlib import Path
from uuid import uuid4

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the Protean config overlay before the domain is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def gamezone_bed():
    from gamezone.domain import gamezone

    bed = DomainFixture(gamezone)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(gamezone_bed):
    with gamezone_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain brokers and event stores
        for _, broker in current_domain.brokers.items():
            broker._data_reset()
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------
@pytest.fixture
def settings():
    from gamezone.config import Settings

    return Settings(jwt_secret="test-secret", store_lock_timeout=2.0)


@pytest.fixture
def storage(settings):
    from gamezone.domain import gamezone
    from gamezone.storage import Storage

    return Storage(gamezone, lock_timeout=settings.store_lock_timeout)


@pytest.fixture
def services(storage, settings):
    from gamezone.services import build_services

    return build_services(storage, settings)


# ---------------------------------------------------------------------------
# Principals
# ---------------------------------------------------------------------------
@pytest.fixture
def shopper():
    from gamezone.identity.access import Principal

    return Principal(user_id=str(uuid4()), role="user")


@pytest.fixture
def other_shopper():
    from gamezone.identity.access import Principal

    return Principal(user_id=str(uuid4()), role="user")


@pytest.fixture
def seller():
    from gamezone.identity.access import Principal

    return Principal(user_id=str(uuid4()), role="seller")


@pytest.fixture
def admin():
    from gamezone.identity.access import Principal

    return Principal(user_id=str(uuid4()), role="admin")


# ---------------------------------------------------------------------------
# Data builders
# ---------------------------------------------------------------------------
def product_data(**overrides):
    data = {
        "name": "Spider-Man 2",
        "description": "Swing through New York as Peter and Miles",
        "price": 2499,
        "original_price": 3999,
        "platform": "ps5",
        "condition": "excellent",
        "stock": 10,
        "tags": ["action", "open-world"],
    }
    data.update(overrides)
    return data


@pytest.fixture
def list_product(services, seller):
    """List a product as ``seller``; keyword overrides replace the defaults."""

    def _list(**overrides):
        return services.catalogue.create(seller, **product_data(**overrides))

    return _list


@pytest.fixture
def shipping_address():
    return {
        "name": "Arjun Mehta",
        "phone": "9876543210",
        "street": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "pincode": "560001",
    }


@pytest.fixture
def place_order(services, shipping_address):
    """Put ``quantity`` of each product in the user's cart and check out."""

    def _place(user_id, *products, quantity=1, **kwargs):
        for product in products:
            services.carts.add_item(user_id, product.id, quantity)
        return services.checkout.place_order(user_id, shipping_address, **kwargs)

    return _place
