from types import SimpleNamespace
from unittest.mock import Mock
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from talkhub.database import get_db
from talkhub.main import app


@pytest.fixture
def db_session():
    """Mock database session."""
    return Mock()


@pytest.fixture
def override_db(db_session):
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield db_session
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client(override_db):
    return TestClient(app)


@pytest.fixture
def conversation():
    return SimpleNamespace(
        id=uuid4(),
        customer_name="Maria",
        customer_phone="5511999990000",
        status="closed",
        last_message_at=None,
        updated_at=None,
    )
