"""
Pytest fixtures for threadlog backend tests.

Provides an in-memory app, a per-test clean database, a test client, and a
`make_tx` factory that writes rows through the transaction store.
"""

from datetime import datetime, timedelta

import pytest

from threadlog import create_app
from threadlog.extensions import db
from threadlog.services import transaction_store


BASE_DATE = datetime(2025, 3, 1, 9, 0)


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'TWILIO_ACCOUNT_SID': None,
        'TWILIO_AUTH_TOKEN': None,
        'TWILIO_PHONE_NUMBER': None,
        'VOUCHER_TOGGLE_MODE': 'in_place',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function', autouse=True)
def db_session(app):
    """Fresh tables for each test."""
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    db.session.rollback()


@pytest.fixture
def make_tx(db_session):
    """
    Insert a transaction. `minutes` offsets the date from BASE_DATE so tests
    can lay rows out in a known chronological order.
    """
    def _make(type, details=None, amount=0, category=None, minutes=0, description="", id=None):
        data = {
            "type": type,
            "amount": amount,
            "description": description,
            "category": category,
            "date": BASE_DATE + timedelta(minutes=minutes),
            "details": details or {},
        }
        if id is not None:
            data["id"] = id
        return transaction_store.insert(data)

    return _make


@pytest.fixture
def actor():
    """Operator header for write routes."""
    return {"X-User-Email": "staff@threadlog.test"}
