"""
Pytest fixtures for storefront backend tests.

Every role pool points at the same temporary SQLite file, so data written
through one pool is visible to the others (row-level security only exists
on PostgreSQL).
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from storefront import create_app
from storefront.extensions import db
from storefront.models import App, Category, Employee, Position, Provider, Sale, User
from storefront.models.sales import ORDER_CREATED
from storefront.services.auth_service import hash_password
from storefront.time_utils import utcnow


PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    db_path = tmp_path_factory.mktemp("db") / "storefront-test.sqlite3"
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{db_path}",
        'ORDER_STATUS_UPDATER_ENABLED': False,
        'JWT_SECRET': 'test-secret',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def client(app, db_session):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def catalog(db_session):
    """Two categories, one provider and three apps."""
    games = Category(title="Games", description="Video games")
    tools = Category(title="Utilities", description="System tools")
    provider = Provider(
        name="Northwind Studios",
        provider_type="Developer",
        country="Canada",
        founded_date=date(2011, 5, 3),
        web="https://northwind.example",
    )
    db_session.add_all([games, tools, provider])
    db_session.flush()

    star_drift = App(
        title="Star Drift", description="Arcade space shooter",
        cost_price=Decimal("4.00"), price=Decimal("9.99"), release_date=date(2024, 3, 12),
        category_id=games.id, provider_id=provider.id,
    )
    moon_miner = App(
        title="Moon Miner", description="Idle mining game",
        cost_price=Decimal("1.00"), price=Decimal("4.50"), release_date=date(2023, 1, 5),
        category_id=games.id, provider_id=provider.id,
    )
    disk_sweeper = App(
        title="Disk Sweeper", description="Find and remove large files",
        cost_price=Decimal("0.50"), price=Decimal("2.00"), release_date=None,
        category_id=tools.id, provider_id=provider.id,
    )
    db_session.add_all([star_drift, moon_miner, disk_sweeper])
    db_session.commit()

    return {
        "games_id": games.id,
        "tools_id": tools.id,
        "provider_id": provider.id,
        "star_drift_id": star_drift.id,
        "moon_miner_id": moon_miner.id,
        "disk_sweeper_id": disk_sweeper.id,
    }


def _create_user(db_session, username, email, password=PASSWORD):
    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password) if password else None,
        reg_date=utcnow().date(),
    )
    db_session.add(user)
    db_session.commit()
    return user.id


@pytest.fixture(scope='function')
def customer_id(db_session):
    return _create_user(db_session, "alice", "alice@example.com")


@pytest.fixture(scope='function')
def other_customer_id(db_session):
    return _create_user(db_session, "bob", "bob@example.com")


@pytest.fixture(scope='function')
def staff(db_session):
    """One employee per staff role; returns username -> employee id."""
    ids = {}
    for username, title in (
        ("admin", "Administrator"),
        ("moder", "Moderator"),
        ("helper", "Support specialist"),
        ("numbers", "Analyst"),
        ("intern", "Intern"),
    ):
        position = Position(title=title)
        db_session.add(position)
        db_session.flush()
        employee = Employee(
            username=username,
            password_hash=hash_password(PASSWORD),
            position_id=position.id,
            hire_date=utcnow().date(),
        )
        db_session.add(employee)
        db_session.flush()
        ids[username] = employee.id
    db_session.commit()
    return ids


@pytest.fixture(scope='function')
def make_order(db_session):
    """Insert a sale directly, optionally back-dated by `age_seconds`."""
    def _make(user_id, app_id, *, status=ORDER_CREATED, age_seconds=0, amount="9.99"):
        sale = Sale(
            user_id=user_id,
            app_id=app_id,
            status=status,
            amount=Decimal(amount),
            sale_date=utcnow() - timedelta(seconds=age_seconds),
        )
        db_session.add(sale)
        db_session.commit()
        return sale.id
    return _make


def get_auth_token(client, username: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def customer_headers(client, customer_id):
    return auth_headers(get_auth_token(client, "alice"))


@pytest.fixture(scope='function')
def other_customer_headers(client, other_customer_id):
    return auth_headers(get_auth_token(client, "bob"))


@pytest.fixture(scope='function')
def admin_headers(client, staff):
    return auth_headers(get_auth_token(client, "admin"))


@pytest.fixture(scope='function')
def moderator_headers(client, staff):
    return auth_headers(get_auth_token(client, "moder"))


@pytest.fixture(scope='function')
def support_headers(client, staff):
    return auth_headers(get_auth_token(client, "helper"))


@pytest.fixture(scope='function')
def analyst_headers(client, staff):
    return auth_headers(get_auth_token(client, "numbers"))
