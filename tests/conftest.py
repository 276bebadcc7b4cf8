"""
Pytest configuration and fixtures.
"""
import os
from datetime import datetime, timedelta

import pytest
from flask_jwt_extended import create_access_token

from gymapp import create_app
from gymapp import db as _db
from gymapp.membership import MembershipStatusEngine, PlanCatalog, SQLAlchemyMembershipStore
from gymapp.models import Member


class FrozenClock:
    """Clock returning a fixed, manually advanced UTC time."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    """Clock frozen at 2024-05-01 12:00 UTC."""
    return FrozenClock(datetime(2024, 5, 1, 12, 0, 0))


@pytest.fixture
def app(clock):
    """
    Create a Flask application configured for testing.

    Each test gets its own in-memory database.

    Returns:
        Flask: The Flask application instance.
    """
    os.environ["FLASK_ENV"] = "testing"
    app = create_app('testing')
    app.extensions['membership_engine'].clock = clock

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    """
    Create a test client for the Flask application.

    Returns:
        FlaskClient: A test client for the Flask application.
    """
    return app.test_client()


@pytest.fixture
def db(app):
    """
    Fixture for the SQLAlchemy database object.

    Returns:
        SQLAlchemy db: The database object for testing.
    """
    return _db


@pytest.fixture
def engine(app):
    """The membership engine built by the application factory."""
    return app.extensions['membership_engine']


@pytest.fixture
def make_engine(app, clock):
    """Factory for engines with non-default policies, sharing the test database."""
    def factory(**policy):
        return MembershipStatusEngine(
            store=SQLAlchemyMembershipStore(_db),
            catalog=PlanCatalog.from_config(),
            clock=clock,
            **policy
        )
    return factory


@pytest.fixture
def member(db):
    """A regular member."""
    member = Member(name="Asha Rawat", email="asha@example.com", password="password123")
    db.session.add(member)
    db.session.commit()
    return member


@pytest.fixture
def admin(db):
    """A member with admin privileges."""
    admin = Member(name="Front Desk", email="admin@example.com", password="admin12345", is_admin=True)
    db.session.add(admin)
    db.session.commit()
    return admin


def auth_headers(member):
    token = create_access_token(
        identity=str(member.id),
        additional_claims={'is_admin': bool(member.is_admin)}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def member_headers(member):
    return auth_headers(member)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)
