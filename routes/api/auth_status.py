from flask import Blueprint, session

from auth.entitlements import get_current_user
from core.extensions import csrf
from core.http_utils import _json_ok
from domain.errors import AuthorizationError
from services.auth_tokens import issue_access_token

api_auth_status_bp = Blueprint("api_auth_status", __name__)


def nickname_for(user) -> str:
    if user.display_name:
        return user.display_name
    if user.email and "@" in user.email:
        return user.email.split("@", 1)[0]
    return "사용자"


@csrf.exempt
@api_auth_status_bp.route("/auth/status", methods=["GET"])
def auth_status():
    u = get_current_user()
    if not u:
        return _json_ok({"loggedIn": False})
    return _json_ok({
        "loggedIn": True,
        "user": {
            "id": u.user_id,
            "email": u.email,
            "name": nickname_for(u),
            "avatar_url": u.avatar_url,
        },
    })


# 세션 사용자에게 Bearer 액세스 토큰 발급 (결제 취소 등 Bearer 전용 API 용)
@csrf.exempt
@api_auth_status_bp.route("/auth/token", methods=["POST"])
def auth_token():
    u = get_current_user()
    if not u:
        raise AuthorizationError()
    return _json_ok({"accessToken": issue_access_token(u.user_id), "tokenType": "Bearer"})


@csrf.exempt
@api_auth_status_bp.route("/auth/logout", methods=["POST"])
def auth_logout():
    session.clear()
    return _json_ok()
