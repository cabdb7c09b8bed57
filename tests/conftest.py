"""Shared fixtures for the expense ledger tests.

Everything runs against in-memory storage unless a test asks for
``tmp_path`` explicitly, so no test touches a real data directory.
"""

from __future__ import annotations

import pytest

from api.app import create_app
from ledger.config import Settings
from ledger.session import LedgerSession
from ledger.storage import MemoryStorage


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def session(storage):
    return LedgerSession(storage)


@pytest.fixture
def seeded_session(session):
    """Three records across two categories, added oldest first."""
    session.ledger.add({"date": "2024-01-05", "amount": "20", "category": "food", "note": "lunch", "method": "cash"})
    session.ledger.add({"date": "2024-01-07", "amount": "30", "category": "food", "note": "dinner", "method": "card"})
    session.ledger.add({"date": "2024-01-10", "amount": "10", "category": "bill", "note": "water", "method": "transfer"})
    return session


@pytest.fixture
def app(storage):
    flask_app = create_app(storage=storage, settings=Settings(environment="dev"))
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
