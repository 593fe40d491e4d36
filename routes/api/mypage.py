# routes/api/mypage.py
from typing import Optional

from flask import Blueprint, g

from auth.entitlements import get_current_user, subscription_status_for
from auth.guards import require_login
from core.extensions import csrf
from core.http_utils import _json_ok
from domain.models import User
from routes.api.auth_status import nickname_for
from routes.api.subscription import status_payload

api_mypage_bp = Blueprint("api_mypage", __name__)


def _profile(user) -> Optional[dict]:
    if not user:
        return None
    return {
        "profileImage": user.avatar_url or "",
        "nickname": nickname_for(user),
        "email": user.email or "",
        "joinDate": user.created_at.strftime("%Y.%m") if user.created_at else "",
    }


# ===== 마이페이지: 프로필 + 구독 상태 =====
@csrf.exempt
@api_mypage_bp.route("/mypage", methods=["GET"])
@require_login
def mypage_overview():
    user = get_current_user()
    if user is None or user.user_id != g.principal.id:
        # Bearer 로 들어온 경우 세션 사용자와 다를 수 있음
        user = User.query.filter_by(user_id=g.principal.id).first()

    status = subscription_status_for(g.principal.id)
    return _json_ok({
        "profile": _profile(user),
        "subscription": status_payload(status),
    })
