# domain/ledger.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from domain.errors import PersistenceError
from domain.models import Payment

STATUS_PAID = "Paid"
STATUS_CANCEL = "Cancel"


@dataclass(frozen=True)
class LedgerEntry:
    """원장 한 행의 불변 스냅샷 (DB 세션과 분리된 값 객체)"""
    user_id: str
    transaction_key: str
    amount: int
    status: str
    start_at: datetime
    end_at: datetime
    end_grace_at: datetime
    next_schedule_at: Optional[datetime] = None
    next_schedule_id: Optional[str] = None
    idempotency_key: Optional[str] = None
    gateway_status: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Payment) -> "LedgerEntry":
        return cls(
            id=row.id,
            user_id=row.user_id,
            transaction_key=row.transaction_key,
            amount=int(row.amount),
            status=row.status,
            start_at=row.start_at,
            end_at=row.end_at,
            end_grace_at=row.end_grace_at,
            next_schedule_at=row.next_schedule_at,
            next_schedule_id=row.next_schedule_id,
            idempotency_key=row.idempotency_key,
            gateway_status=row.gateway_status,
            created_at=row.created_at,
        )

    @property
    def is_paid(self) -> bool:
        return self.status == STATUS_PAID


class LedgerStore:
    """
    payment 테이블 접근 계층.
    - 조회: user_id(+transaction_key) equality 필터 + created_at 내림차순
    - 기록: insert-one 만 제공 (update/delete 없음)
    create_app() 에서 한 번 만들고 app.extensions["ledger"] 로 주입한다.
    """

    def __init__(self, db):
        self.db = db

    def _failed(self, op: str, e: SQLAlchemyError) -> PersistenceError:
        # SQL 원문/파라미터는 서버 로그에만 남기고 응답에는 싣지 않는다
        self.db.session.rollback()
        current_app.logger.error("[ledger] %s failed: %s", op, e)
        return PersistenceError()

    def list_for_user(self, user_id: str) -> List[LedgerEntry]:
        try:
            rows = (
                Payment.query
                .filter(Payment.user_id == user_id)
                .order_by(Payment.created_at.desc(), Payment.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._failed("list_for_user", e) from e
        return [LedgerEntry.from_row(r) for r in rows]

    def list_for_transaction(self, user_id: str, transaction_key: str) -> List[LedgerEntry]:
        try:
            rows = (
                Payment.query
                .filter(
                    Payment.user_id == user_id,
                    Payment.transaction_key == transaction_key,
                )
                .order_by(Payment.created_at.desc(), Payment.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._failed("list_for_transaction", e) from e
        return [LedgerEntry.from_row(r) for r in rows]

    def find_by_idempotency_key(self, user_id: str, idempotency_key: str,
                                since: datetime) -> Optional[LedgerEntry]:
        try:
            row = (
                Payment.query
                .filter(
                    Payment.user_id == user_id,
                    Payment.idempotency_key == idempotency_key,
                    Payment.status == STATUS_PAID,
                    Payment.created_at >= since,
                )
                .order_by(Payment.created_at.desc())
                .first()
            )
        except SQLAlchemyError as e:
            raise self._failed("find_by_idempotency_key", e) from e
        return LedgerEntry.from_row(row) if row else None

    def append(self, entry: LedgerEntry) -> LedgerEntry:
        row = Payment(
            user_id=entry.user_id,
            transaction_key=entry.transaction_key,
            amount=int(entry.amount),
            status=entry.status,
            start_at=entry.start_at,
            end_at=entry.end_at,
            end_grace_at=entry.end_grace_at,
            next_schedule_at=entry.next_schedule_at,
            next_schedule_id=entry.next_schedule_id,
            idempotency_key=entry.idempotency_key,
            gateway_status=entry.gateway_status,
        )
        if entry.created_at is not None:
            row.created_at = entry.created_at
        try:
            self.db.session.add(row)
            self.db.session.commit()
        except SQLAlchemyError as e:
            raise self._failed("append", e) from e
        return LedgerEntry.from_row(row)
