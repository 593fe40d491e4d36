# domain/models.py
from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Index

db = SQLAlchemy()


def utcnow():
    # NOTE: DB 는 naive UTC 전제 (timezone=False 컬럼)
    return datetime.now(timezone.utc).replace(tzinfo=None)


# =========================
#       Core: Users
# =========================
class User(db.Model):
    """
    외부 인증(Google OIDC)으로 들어온 사용자의 프로필 레코드.
    - user_id: 인증 주체의 안정적인 식별자(결제 원장의 user_id 와 동일)
    """
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(255), unique=True, nullable=False, index=True)

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(50), nullable=True)
    avatar_url = db.Column(db.String(512), nullable=True)

    provider = db.Column(db.String(16), nullable=False, default="google")
    provider_sub = db.Column(db.String(255), nullable=True, unique=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)


# =========================
#   Payment ledger (append-only)
# =========================
class Payment(db.Model):
    """
    결제/취소 원장. 한 행 = 한 번의 결제(Paid) 또는 취소(Cancel) 이벤트.
    - 행은 절대 수정/삭제하지 않는다. 취소는 음수 금액의 새 행으로 기록.
    - transaction_key: PortOne 결제 id. 결제 행과 그 취소 행이 공유.
    - 같은 transaction_key 중 created_at 이 가장 최신인 행이 현재 상태.
    """
    __tablename__ = "payment"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(255), nullable=False, index=True)
    transaction_key = db.Column(db.String(128), nullable=False, index=True)

    # KRW 정수. 결제 +, 취소 -
    amount = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(16), nullable=False, index=True)  # Paid / Cancel

    start_at = db.Column(db.DateTime, nullable=False)
    end_at = db.Column(db.DateTime, nullable=False)
    end_grace_at = db.Column(db.DateTime, nullable=False)

    # 다음 정기결제 예약 정보(기록만 함)
    next_schedule_at = db.Column(db.DateTime, nullable=True)
    next_schedule_id = db.Column(db.String(64), nullable=True)

    # 클라이언트 멱등키 (중복 결제 요청 차단용)
    idempotency_key = db.Column(db.String(80), nullable=True, index=True)
    # 결제 시점 게이트웨이 상태 (PAID / PENDING ...). 멱등 재응답에 사용
    gateway_status = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    __table_args__ = (
        Index("idx_payment_user_created", "user_id", "created_at"),
        Index("idx_payment_user_txkey", "user_id", "transaction_key"),
    )


# =========================
#   Magazines
# =========================
class Magazine(db.Model):
    __tablename__ = "magazines"

    id = db.Column(db.Integer, primary_key=True)
    category = db.Column(db.String(32), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.String(500), nullable=False)
    content = db.Column(db.Text, nullable=False)
    tags = db.Column(db.JSON, nullable=True)
    image_url = db.Column(db.String(512), nullable=True)

    author_id = db.Column(db.String(255), nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)
