"""
Pytest fixtures for shopmgr tests.

Every test gets its own data directory under tmp_path. bcrypt runs at cost 4
so login-heavy tests stay fast.
"""

from decimal import Decimal

import pytest

from shopmgr import create_app
from shopmgr.config import Config
from shopmgr.models import User
from shopmgr.permissions import ALL_PERMISSIONS, MANAGE_CUSTOMERS, MANAGE_SALES
from shopmgr.services import auth_service, customers_service, products_service
from shopmgr.services.session_service import create_session


@pytest.fixture(scope='function')
def config(tmp_path):
    """Config pointing at a fresh data directory."""
    return Config(data_dir=tmp_path / "data", bcrypt_rounds=4)


@pytest.fixture(scope='function')
def app(config):
    return create_app(config)


@pytest.fixture(scope='function')
def stores(app):
    return app.stores


@pytest.fixture(scope='function')
def admin_session(stores):
    """Session for the bootstrap admin (admin/admin, all permissions)."""
    return auth_service.login(stores, "admin", "admin")


@pytest.fixture(scope='function')
def session_with():
    """Factory: a session whose user holds exactly the given permission codes."""
    def _make(*codes, user_id=99, username="limited"):
        user = User(
            id=user_id,
            username=username,
            password_hash="",
            permissions=frozenset(codes),
            is_active=True,
        )
        return create_session(user)
    return _make


@pytest.fixture(scope='function')
def no_perm_session(session_with):
    return session_with()


@pytest.fixture(scope='function')
def cashier_session(session_with):
    return session_with(MANAGE_CUSTOMERS, MANAGE_SALES, username="cashier")


@pytest.fixture(scope='function')
def full_session(session_with):
    return session_with(*ALL_PERMISSIONS, user_id=1, username="admin")


@pytest.fixture(scope='function')
def mouse(stores, admin_session):
    """Mouse: cost 5.00, price 10.00, stock 20, minimum 5."""
    return products_service.create_product(
        stores,
        admin_session,
        name="Mouse",
        category="Peripherals",
        brand="Logi",
        cost_price=Decimal("5.00"),
        sell_price=Decimal("10.00"),
        stock=20,
        min_stock_level=5,
    )


@pytest.fixture(scope='function')
def alice(stores, admin_session):
    return customers_service.create_customer(
        stores,
        admin_session,
        name="Alice",
        phone="555-0100",
        email="alice@example.com",
        address="1 Main St, Springfield",
    )
