from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from app import create_app
from core.config import Config
from domain.ledger import LedgerEntry, LedgerStore
from domain.models import db, User
from services.auth_tokens import issue_access_token
from services.portone import GatewayResponse, PortOneClient


class TestConfig(Config):
    TESTING = True
    ENV = "development"
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    RATELIMIT_ENABLED = False
    WTF_CSRF_ENABLED = False
    PORTONE_API_SECRET = "test-portone-secret"


@pytest.fixture
def gateway():
    gw = MagicMock(spec=PortOneClient)
    gw.charge_billing_key.return_value = GatewayResponse(200, {"id": "tx_gw_1", "status": "PAID"})
    gw.cancel_payment.return_value = GatewayResponse(200, {"cancellation": {"status": "SUCCEEDED"}})
    return gw


@pytest.fixture
def app(gateway):
    app = create_app(TestConfig, portone_client=gateway)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ledger(app) -> LedgerStore:
    return app.extensions["ledger"]


@pytest.fixture
def user(app):
    u = User(user_id="user-1", email="reader@example.com", display_name="reader",
             created_at=datetime(2026, 3, 2, 9, 0))
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture
def other_user(app):
    u = User(user_id="user-2", email="other@example.com")
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture
def bearer(app, user):
    return {"Authorization": f"Bearer {issue_access_token(user.user_id)}"}


@pytest.fixture
def login(client, user):
    with client.session_transaction() as sess:
        sess["user"] = {"user_id": user.user_id, "email": user.email}
    return user


def paid_entry(key, *, user_id="user-1", amount=9900, start_at, end_grace_at=None, created_at=None, end_at=None):
    end_at = end_at or start_at + timedelta(days=30)
    return LedgerEntry(
        user_id=user_id,
        transaction_key=key,
        amount=amount,
        status="Paid",
        start_at=start_at,
        end_at=end_at,
        end_grace_at=end_grace_at or end_at + timedelta(days=1),
        created_at=created_at or start_at,
    )
