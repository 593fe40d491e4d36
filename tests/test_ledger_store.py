from dataclasses import replace
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from domain.errors import PersistenceError
from domain.ledger import LedgerStore
from tests.conftest import paid_entry

T0 = datetime(2026, 4, 1, 9, 0, 0)


def test_list_for_user_newest_first(ledger):
    ledger.append(paid_entry("tx1", start_at=T0))
    ledger.append(paid_entry("tx2", start_at=T0 + timedelta(days=1)))
    ledger.append(paid_entry("tx-other", user_id="user-9", start_at=T0 + timedelta(days=2)))

    assert [e.transaction_key for e in ledger.list_for_user("user-1")] == ["tx2", "tx1"]


def test_same_created_at_latest_insert_first(ledger):
    ledger.append(paid_entry("tx1", start_at=T0, created_at=T0))
    ledger.append(paid_entry("tx1", start_at=T0, created_at=T0, amount=100))

    entries = ledger.list_for_transaction("user-1", "tx1")
    assert [e.amount for e in entries] == [100, 9900]


def test_append_returns_stored_entry(ledger):
    stored = ledger.append(paid_entry("tx1", start_at=T0))
    assert stored.id is not None
    assert stored.created_at == T0
    assert stored.is_paid


def test_find_by_idempotency_key_respects_window(ledger):
    ledger.append(replace(paid_entry("tx1", start_at=T0), idempotency_key="key-00000001"))

    assert ledger.find_by_idempotency_key("user-1", "key-00000001", T0 - timedelta(minutes=5)) is not None
    assert ledger.find_by_idempotency_key("user-1", "key-00000001", T0 + timedelta(minutes=5)) is None
    assert ledger.find_by_idempotency_key("user-2", "key-00000001", T0 - timedelta(minutes=5)) is None


def test_database_error_becomes_persistence_error(app):
    db = MagicMock()
    db.session.commit.side_effect = OperationalError("INSERT", {}, Exception("disk full"))
    store = LedgerStore(db)

    with pytest.raises(PersistenceError) as exc:
        store.append(paid_entry("tx1", start_at=T0))
    assert exc.value.details is None
    db.session.rollback.assert_called_once()
