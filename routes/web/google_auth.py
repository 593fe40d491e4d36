from urllib.parse import urlparse

from flask import Blueprint, redirect, request, session, current_app
from secrets import token_urlsafe

from core.extensions import oauth
from domain.errors import ConfigurationError
from domain.models import db, User, utcnow


google_auth_bp = Blueprint("google_auth", __name__, url_prefix="/auth")


def nickname_from_email(email: str) -> str:
    # 이메일 앞부분만 사용 (최대 20자)
    if not email or "@" not in email:
        return "사용자"
    return email.split("@", 1)[0][:20]


def _safe_next_url(next_url: str) -> str:
    fallback = current_app.config.get("POST_LOGIN_REDIRECT", "/magazines")
    if not next_url:
        return fallback
    p = urlparse(next_url)
    if p.scheme or p.netloc:
        return fallback
    return next_url if next_url.startswith("/") else "/" + next_url


def _register_google_client():
    """
    Authlib OAuth client를 최초 1회 등록.
    """
    if getattr(oauth, "google", None):
        return oauth.google

    cfg = current_app.config
    if not cfg.get("GOOGLE_CLIENT_ID") or not cfg.get("GOOGLE_CLIENT_SECRET"):
        raise ConfigurationError("GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET 환경변수가 설정되지 않았습니다.")

    oauth.register(
        name="google",
        server_metadata_url=cfg.get("GOOGLE_DISCOVERY_URL"),
        client_id=cfg["GOOGLE_CLIENT_ID"],
        client_secret=cfg["GOOGLE_CLIENT_SECRET"],
        client_kwargs={"scope": "openid email profile"},
    )
    return oauth.google


def upsert_google_user(userinfo: dict) -> User:
    """
    Google OIDC userinfo -> users 행.
    provider_sub 로 먼저 찾고, 없으면 email 로 연결, 그래도 없으면 새로 만든다.
    """
    provider_sub = userinfo.get("sub")
    email = (userinfo.get("email") or "").strip().lower()
    if not provider_sub or not email:
        raise ValueError("missing sub/email")

    user = User.query.filter_by(provider="google", provider_sub=provider_sub).first()
    if not user:
        user = User.query.filter_by(email=email).first()

    if not user:
        user = User(
            user_id=f"google_{provider_sub}",
            email=email,
            provider="google",
            provider_sub=provider_sub,
        )
        db.session.add(user)

    user.provider_sub = user.provider_sub or provider_sub
    user.email = email
    user.display_name = userinfo.get("name") or user.display_name or nickname_from_email(email)
    user.avatar_url = userinfo.get("picture") or user.avatar_url
    user.last_login_at = utcnow()
    db.session.commit()
    return user


@google_auth_bp.get("/login/google")
def login_google():
    google = _register_google_client()

    session["post_login_redirect"] = _safe_next_url(request.args.get("next"))
    session["oidc_nonce"] = token_urlsafe(24)

    redirect_uri = request.url_root.rstrip("/") + "/auth/callback/google"
    return google.authorize_redirect(redirect_uri, nonce=session["oidc_nonce"])


@google_auth_bp.get("/callback/google")
def callback_google():
    google = _register_google_client()

    token = google.authorize_access_token()

    nonce = session.pop("oidc_nonce", None)
    if not nonce:
        current_app.logger.warning("Missing oidc_nonce. args=%s", dict(request.args))
        return "Missing OIDC nonce. Please restart login.", 400

    userinfo = google.parse_id_token(token, nonce=nonce)
    try:
        user = upsert_google_user(userinfo)
    except ValueError:
        return "Google login failed: missing sub/email", 400

    # clear 전에 next_url 확보
    next_url = session.pop("post_login_redirect", None) or _safe_next_url(None)

    # 로그인 세션 세팅
    session.clear()
    session["user"] = {"user_id": user.user_id, "email": user.email}
    session.permanent = True

    current_app.logger.info("[auth/google] login user=%s", user.user_id)
    return redirect(next_url)
