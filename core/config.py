import os


def _csv(v: str):
    return [x.strip() for x in (v or "").split(",") if x.strip()]


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    return int(v.strip())


class Config:
    # Flask 보안 키 (세션 + 액세스 토큰 서명)
    SECRET_KEY = os.getenv("SECRET_KEY", "")

    ENV = os.getenv("FLASK_ENV", "production")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///magazine.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 280,
    }

    # -------------------------
    # 인증 (세션 / Bearer 액세스 토큰)
    # -------------------------
    ACCESS_TOKEN_SALT = os.getenv("ACCESS_TOKEN_SALT", "access-token-v1")
    ACCESS_TOKEN_TTL_SECONDS = _env_int("ACCESS_TOKEN_TTL_SECONDS", 60 * 60)

    GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "").strip()
    GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET", "").strip()
    GOOGLE_DISCOVERY_URL = os.getenv(
        "GOOGLE_DISCOVERY_URL",
        "https://accounts.google.com/.well-known/openid-configuration",
    )
    # 로그인 후 돌아갈 기본 경로
    POST_LOGIN_REDIRECT = os.getenv("POST_LOGIN_REDIRECT", "/magazines")

    # -------------------------
    # CORS
    # -------------------------
    CORS_ORIGINS = _csv(os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"))

    # -------------------------
    # Rate limiting (Flask-Limiter 표준 키)
    # -------------------------
    REDIS_URL = os.getenv("REDIS_URL", "")
    RATELIMIT_STORAGE_URI = REDIS_URL if REDIS_URL else "memory://"
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "200 per hour")
    RATELIMIT_PAYMENTS = os.getenv("RATELIMIT_PAYMENTS", "10 per minute")

    # -------------------------
    # PortOne v2
    # -------------------------
    PORTONE_API_BASE = os.getenv("PORTONE_API_BASE", "https://api.portone.io").rstrip("/")
    PORTONE_API_SECRET = os.getenv("PORTONE_API_SECRET", "").strip()
    # 재시도는 하지 않음 (이중 결제 위험) - timeout만 설정
    PORTONE_TIMEOUT_SECONDS = _env_int("PORTONE_TIMEOUT_SECONDS", 10)
    PORTONE_CURRENCY = os.getenv("PORTONE_CURRENCY", "KRW")
    PORTONE_DEFAULT_CANCEL_REASON = "취소 사유 없음"

    # -------------------------
    # 구독 기간 정책
    # -------------------------
    SUBSCRIPTION_PERIOD_DAYS = 30
    SUBSCRIPTION_GRACE_DAYS = 1
    # 다음 정기결제 예약 시각: 10:00 ~ 10:59 (분은 랜덤)
    RENEWAL_HOUR = 10
    SERVICE_TIMEZONE_OFFSET_HOURS = 9  # KST

    # 중복 결제(더블클릭 등) 방지: 같은 idempotencyKey 재요청 허용 구간
    CHARGE_IDEMPOTENCY_WINDOW_SECONDS = _env_int("CHARGE_IDEMPOTENCY_WINDOW_SECONDS", 600)

    # -------------------------
    # i18n (Flask-Babel)
    # -------------------------
    LANGUAGES = ["ko", "en"]
    BABEL_DEFAULT_LOCALE = "ko"
    BABEL_DEFAULT_TIMEZONE = "Asia/Seoul"
