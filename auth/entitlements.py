# auth/entitlements.py
from dataclasses import dataclass
from typing import Optional

from flask import current_app, g, request, session

from domain.models import User
from domain.subscription import SubscriptionStatus, evaluate
from services.auth_tokens import verify_access_token
from utils.time_utils import utcnow_naive


@dataclass(frozen=True)
class Principal:
    """서버에서 검증된 인증 주체. id 는 결제 원장의 user_id"""
    id: str
    email: Optional[str] = None
    via: str = "session"  # session | bearer


# 요청 시작 시 세션 사용자를 g 에 올려두고, 이후에는 get_current_user() 로 조회
def load_current_user():
    sess = session.get("user") or {}
    uid = sess.get("user_id")

    if not uid:
        g.current_user = None
        return None

    user = User.query.filter_by(user_id=uid).first()
    if user is not None and not user.is_active:
        user = None
    g.current_user = user
    return user


def get_current_user() -> Optional[User]:
    return getattr(g, "current_user", None)


def current_session_principal() -> Optional[Principal]:
    user = get_current_user()
    if not user:
        return None
    return Principal(id=user.user_id, email=user.email, via="session")


def bearer_token() -> Optional[str]:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    token = auth[len("Bearer "):].strip()
    return token or None


def resolve_bearer(token: str) -> Optional[Principal]:
    uid = verify_access_token(token)
    if not uid:
        return None
    user = User.query.filter_by(user_id=uid).first()
    if not user or not user.is_active:
        return None
    return Principal(id=user.user_id, email=user.email, via="bearer")


def authenticate_request(*, allow_session: bool = True) -> Optional[Principal]:
    """
    Bearer 헤더가 있으면 그것만 본다 (무효면 None, 세션으로 대체하지 않음).
    없으면 allow_session 일 때 세션 사용자.
    """
    token = bearer_token()
    if token:
        return resolve_bearer(token)
    if allow_session:
        return current_session_principal()
    return None


def subscription_status_for(user_id: str, now=None) -> SubscriptionStatus:
    ledger = current_app.extensions["ledger"]
    return evaluate(ledger.list_for_user(user_id), now or utcnow_naive())
