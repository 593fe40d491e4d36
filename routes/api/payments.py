# routes/api/payments.py
from flask import Blueprint, current_app, g

from auth.entitlements import authenticate_request
from core.extensions import csrf, limiter
from core.http_utils import _json_ok
from domain.schema import cancel_request_schema, charge_request_schema
from security.input import require_json_input
from services.payments import BillingPolicy, cancel, charge

api_payments_bp = Blueprint("api_payments", __name__)


def _payments_limit():
    return current_app.config.get("RATELIMIT_PAYMENTS", "10 per minute")


# ---- 빌링키 정기결제 ----
@csrf.exempt
@api_payments_bp.route("/payments", methods=["POST"])
@limiter.limit(_payments_limit)
@require_json_input(charge_request_schema)
def create_payment():
    body = g.json_input
    customer = body.get("customer") or {}
    custom_data = body.get("customData")

    # 결제 대상: customData(로그인 user_id) 우선, 없으면 customer.id
    asserted = custom_data or customer.get("id")

    # 세션 또는 Bearer. 서버 검증 실패 시 클라이언트 주장으로 대체하지 않는다.
    principal = authenticate_request(allow_session=True)

    result = charge(
        current_app.extensions["ledger"],
        current_app.extensions["portone"],
        principal=principal,
        billing_key=body.get("billingKey"),
        user_id=asserted,
        customer_id=customer.get("id"),
        order_name=body.get("orderName"),
        amount=body.get("amount"),
        custom_data=custom_data,
        idempotency_key=body.get("idempotencyKey"),
        policy=BillingPolicy.from_config(current_app.config),
    )
    return _json_ok({"paymentId": result.transaction_key, "status": result.gateway_status})


# ---- 결제 취소 ----
@csrf.exempt
@api_payments_bp.route("/payments/cancel", methods=["POST"])
@limiter.limit(_payments_limit)
@require_json_input(cancel_request_schema)
def cancel_payment():
    body = g.json_input

    # Bearer 토큰 필수 (세션 쿠키만으로는 취소 불가)
    principal = authenticate_request(allow_session=False)

    cancel(
        current_app.extensions["ledger"],
        current_app.extensions["portone"],
        principal=principal,
        transaction_key=body.get("transactionKey"),
        reason=body.get("reason"),
        policy=BillingPolicy.from_config(current_app.config),
    )
    return _json_ok()
