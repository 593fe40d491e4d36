# routes/api/subscription.py
from flask import Blueprint, g

from auth.entitlements import subscription_status_for
from auth.guards import require_login
from core.extensions import csrf
from core.http_utils import _json_ok

api_subscription_bp = Blueprint("api_subscription", __name__)


def status_payload(status) -> dict:
    payload = {
        "isSubscribed": status.active,
        "statusMessage": status.status_message,
    }
    if status.active:
        payload["transactionKey"] = status.active_transaction_key
    return payload


# 마이페이지/구독 배지에서 사용. 매 요청마다 원장을 다시 평가한다.
@csrf.exempt
@api_subscription_bp.route("/subscription/status", methods=["GET"])
@require_login
def subscription_status():
    status = subscription_status_for(g.principal.id)
    return _json_ok(status_payload(status))
