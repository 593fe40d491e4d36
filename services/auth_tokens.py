# Bearer 액세스 토큰 발급/검증 (세션 밖 API 호출용)
from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from domain.errors import ConfigurationError


def _access_serializer(app=None) -> URLSafeTimedSerializer:
    cfg = (app or current_app).config
    secret = cfg.get("SECRET_KEY")
    if not secret:
        # 검증 수단이 없으면 실패로 닫는다 (클라이언트 주장 신뢰 금지)
        raise ConfigurationError("SECRET_KEY가 설정되지 않았습니다.")
    return URLSafeTimedSerializer(secret, salt=cfg.get("ACCESS_TOKEN_SALT", "access-token-v1"))


def issue_access_token(user_id: str, app=None) -> str:
    return _access_serializer(app).dumps({"sub": user_id})


def verify_access_token(token: str, app=None):
    """유효하면 user_id, 아니면 None. 만료/위조 모두 None"""
    cfg = (app or current_app).config
    s = _access_serializer(app)
    try:
        data = s.loads(token, max_age=cfg.get("ACCESS_TOKEN_TTL_SECONDS", 3600))
    except (SignatureExpired, BadSignature):
        return None
    if not isinstance(data, dict):
        return None
    return data.get("sub") or None
