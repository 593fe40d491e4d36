from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from auth.entitlements import Principal
from domain.errors import AuthorizationError, GatewayError, PersistenceError, ValidationError
from services.payments import BillingPolicy, charge
from services.portone import GatewayResponse


def _body(**overrides):
    body = {
        "billingKey": "billing-key-123",
        "orderName": "월간 구독",
        "amount": 9900,
        "customer": {"id": "user-1"},
        "customData": "user-1",
    }
    body.update(overrides)
    return body


# ---------------- HTTP ----------------

def test_charge_success_records_single_paid_entry(client, bearer, ledger, gateway):
    res = client.post("/payments", json=_body(), headers=bearer)

    assert res.status_code == 200
    data = res.get_json()
    assert data == {"success": True, "paymentId": "tx_gw_1", "status": "PAID"}

    entries = ledger.list_for_user("user-1")
    assert len(entries) == 1
    e = entries[0]
    assert e.status == "Paid"
    assert e.amount == 9900
    assert e.transaction_key == "tx_gw_1"
    assert e.end_at - e.start_at == timedelta(days=30)
    assert e.end_grace_at == e.end_at + timedelta(days=1)
    assert e.end_grace_at == e.start_at + timedelta(days=31)
    assert e.next_schedule_id

    gateway.charge_billing_key.assert_called_once()
    kwargs = gateway.charge_billing_key.call_args.kwargs
    assert kwargs["billing_key"] == "billing-key-123"
    assert kwargs["customer_id"] == "user-1"
    assert kwargs["amount"] == 9900


def test_charge_makes_subscription_active(client, bearer):
    client.post("/payments", json=_body(), headers=bearer)

    res = client.get("/subscription/status", headers=bearer)
    assert res.get_json() == {
        "success": True,
        "isSubscribed": True,
        "statusMessage": "구독중",
        "transactionKey": "tx_gw_1",
    }


def test_charge_accepts_session_login(client, login, ledger):
    res = client.post("/payments", json=_body())
    assert res.status_code == 200
    assert len(ledger.list_for_user("user-1")) == 1


def test_charge_missing_billing_key_is_400(client, bearer, ledger, gateway):
    res = client.post("/payments", json=_body(billingKey=None), headers=bearer)

    assert res.status_code == 400
    assert res.get_json()["success"] is False
    gateway.charge_billing_key.assert_not_called()
    assert ledger.list_for_user("user-1") == []


def test_charge_missing_amount_is_400(client, bearer, gateway):
    res = client.post("/payments", json=_body(amount=None), headers=bearer)
    assert res.status_code == 400
    gateway.charge_billing_key.assert_not_called()


def test_charge_rejects_non_json_body(client, bearer, gateway):
    res = client.post("/payments", data="not json", headers=bearer, content_type="text/plain")
    assert res.status_code == 400
    assert res.get_json()["error"] == "JSON 요청이 필요합니다."
    gateway.charge_billing_key.assert_not_called()


def test_charge_without_credentials_is_401(client, user, gateway, ledger):
    res = client.post("/payments", json=_body())

    assert res.status_code == 401
    assert res.get_json()["success"] is False
    gateway.charge_billing_key.assert_not_called()
    assert ledger.list_for_user("user-1") == []


def test_invalid_bearer_does_not_fall_back_to_session(client, login, gateway):
    res = client.post("/payments", json=_body(), headers={"Authorization": "Bearer forged.token"})

    assert res.status_code == 401
    gateway.charge_billing_key.assert_not_called()


def test_charge_for_another_user_is_403(client, bearer, other_user, gateway, ledger):
    res = client.post(
        "/payments",
        json=_body(customData="user-2", customer={"id": "user-2"}),
        headers=bearer,
    )

    assert res.status_code == 403
    assert res.get_json()["error"] == "결제 권한이 없습니다."
    gateway.charge_billing_key.assert_not_called()
    assert ledger.list_for_user("user-2") == []


def test_charge_customer_mismatch_is_403(client, bearer, gateway):
    res = client.post("/payments", json=_body(customer={"id": "user-2"}), headers=bearer)
    assert res.status_code == 403
    gateway.charge_billing_key.assert_not_called()


def test_gateway_failure_is_passed_through(client, bearer, gateway, ledger):
    gateway.charge_billing_key.side_effect = GatewayError(
        "카드 한도 초과", status_code=400, payload={"type": "CARD_LIMIT", "message": "카드 한도 초과"},
    )

    res = client.post("/payments", json=_body(), headers=bearer)

    assert res.status_code == 400
    data = res.get_json()
    assert data["success"] is False
    assert data["error"] == "카드 한도 초과"
    assert data["details"]["type"] == "CARD_LIMIT"
    assert ledger.list_for_user("user-1") == []


def test_ledger_failure_after_gateway_success_still_succeeds(client, bearer, ledger, monkeypatch):
    monkeypatch.setattr(ledger, "append", MagicMock(side_effect=PersistenceError()))

    res = client.post("/payments", json=_body(), headers=bearer)

    assert res.status_code == 200
    assert res.get_json()["paymentId"] == "tx_gw_1"
    ledger.append.assert_called_once()


def test_pending_gateway_status_is_success(client, bearer, gateway, ledger):
    gateway.charge_billing_key.return_value = GatewayResponse(200, {"id": "tx_pending", "status": "PENDING"})

    res = client.post("/payments", json=_body(), headers=bearer)

    assert res.status_code == 200
    assert res.get_json()["status"] == "PENDING"
    assert [e.transaction_key for e in ledger.list_for_user("user-1")] == ["tx_pending"]


def test_local_payment_id_used_when_gateway_omits_id(client, bearer, gateway, ledger):
    gateway.charge_billing_key.return_value = GatewayResponse(200, {"status": "PAID"})

    res = client.post("/payments", json=_body(), headers=bearer)

    payment_id = res.get_json()["paymentId"]
    assert payment_id.startswith("payment_")
    assert ledger.list_for_user("user-1")[0].transaction_key == payment_id


def test_repeated_idempotency_key_replays_first_charge(client, bearer, gateway, ledger):
    body = _body(idempotencyKey="double-click-0001")

    first = client.post("/payments", json=body, headers=bearer)
    second = client.post("/payments", json=body, headers=bearer)

    assert first.status_code == second.status_code == 200
    assert second.get_json()["paymentId"] == first.get_json()["paymentId"]
    gateway.charge_billing_key.assert_called_once()
    assert len(ledger.list_for_user("user-1")) == 1


# ---------------- service ----------------

def test_charge_service_validates_before_authenticating(app, ledger, gateway):
    with pytest.raises(ValidationError):
        charge(ledger, gateway, principal=None, billing_key="", user_id="user-1",
               order_name="월간 구독", amount=9900)
    gateway.charge_billing_key.assert_not_called()


@pytest.mark.parametrize("amount", [0, -100, True, "9900"])
def test_charge_service_rejects_bad_amount(app, ledger, gateway, amount):
    with pytest.raises(ValidationError):
        charge(ledger, gateway, principal=Principal(id="user-1"), billing_key="bk",
               user_id="user-1", order_name="월간 구독", amount=amount)


def test_charge_service_requires_principal(app, ledger, gateway):
    with pytest.raises(AuthorizationError) as exc:
        charge(ledger, gateway, principal=None, billing_key="bk", user_id="user-1",
               order_name="월간 구독", amount=9900)
    assert exc.value.http_status == 401


def test_charge_service_uses_policy_window(app, ledger, gateway):
    now = datetime(2026, 1, 1, 0, 0, 0)
    policy = BillingPolicy(period_days=7, grace_days=2)

    result = charge(ledger, gateway, principal=Principal(id="user-1"), billing_key="bk",
                    user_id="user-1", order_name="주간 구독", amount=2900, policy=policy, now=now)

    assert result.entry.start_at == now
    assert result.entry.end_at == datetime(2026, 1, 8)
    assert result.entry.end_grace_at == datetime(2026, 1, 10)
    assert result.replayed is False


def test_idempotency_key_of_cancelled_charge_is_spent(client, bearer, gateway):
    body = _body(idempotencyKey="retry-key-0001")
    client.post("/payments", json=body, headers=bearer)
    client.post("/payments/cancel", json={"transactionKey": "tx_gw_1"}, headers=bearer)

    res = client.post("/payments", json=body, headers=bearer)

    assert res.status_code == 409
    assert res.get_json()["success"] is False
    gateway.charge_billing_key.assert_called_once()
    status = client.get("/subscription/status", headers=bearer).get_json()
    assert status["isSubscribed"] is False


def test_idempotency_key_with_different_amount_is_rejected(client, bearer, gateway, ledger):
    client.post("/payments", json=_body(idempotencyKey="amount-key-01"), headers=bearer)

    res = client.post("/payments", json=_body(idempotencyKey="amount-key-01", amount=19900), headers=bearer)

    assert res.status_code == 409
    gateway.charge_billing_key.assert_called_once()
    assert [e.amount for e in ledger.list_for_user("user-1")] == [9900]


def test_replay_reports_stored_gateway_status(client, bearer, gateway):
    gateway.charge_billing_key.return_value = GatewayResponse(200, {"id": "tx_pending", "status": "PENDING"})
    body = _body(idempotencyKey="pending-key-01")

    client.post("/payments", json=body, headers=bearer)
    res = client.post("/payments", json=body, headers=bearer)

    assert res.get_json() == {"success": True, "paymentId": "tx_pending", "status": "PENDING"}
    gateway.charge_billing_key.assert_called_once()


def test_policy_reads_service_timezone_from_config(app, ledger, gateway):
    assert BillingPolicy.from_config(app.config).tz.utcoffset(None) == timedelta(hours=9)

    policy = BillingPolicy.from_config({"SERVICE_TIMEZONE_OFFSET_HOURS": 0})
    result = charge(ledger, gateway, principal=Principal(id="user-1"), billing_key="bk",
                    user_id="user-1", order_name="월간 구독", amount=9900, policy=policy,
                    now=datetime(2026, 1, 1, 0, 0, 0))

    # end_at 2026-01-31 00:00 UTC -> 다음날 10:MM (UTC 기준)
    at = result.entry.next_schedule_at
    assert (at.year, at.month, at.day, at.hour) == (2026, 2, 1, 10)
