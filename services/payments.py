# services/payments.py
"""
빌링키 결제 / 결제 취소 오케스트레이션.

순서는 항상 "게이트웨이 호출(실제 돈 이동) -> 원장 기록".
게이트웨이 성공 후 원장 기록이 실패해도 호출자에게는 성공으로 응답한다
(이미 결제/취소는 PortOne 에서 확정됨). 실패는 로그로만 남긴다.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from flask import current_app
from flask_babel import gettext as _

from domain.errors import AuthorizationError, NotFoundError, PersistenceError, ValidationError
from domain.ledger import LedgerEntry, LedgerStore, STATUS_CANCEL, STATUS_PAID
from domain.subscription import latest_per_transaction
from services.portone import PortOneClient
from utils.billing_dates import compute_window
from utils.idempo import new_payment_id, new_schedule_id
from utils.time_utils import KST, utcnow_naive


@dataclass(frozen=True)
class BillingPolicy:
    period_days: int = 30
    grace_days: int = 1
    renewal_hour: int = 10
    idempotency_window_seconds: int = 600
    default_cancel_reason: str = "취소 사유 없음"
    tz: Any = KST

    @classmethod
    def from_config(cls, cfg) -> "BillingPolicy":
        return cls(
            period_days=cfg.get("SUBSCRIPTION_PERIOD_DAYS", 30),
            grace_days=cfg.get("SUBSCRIPTION_GRACE_DAYS", 1),
            renewal_hour=cfg.get("RENEWAL_HOUR", 10),
            idempotency_window_seconds=cfg.get("CHARGE_IDEMPOTENCY_WINDOW_SECONDS", 600),
            default_cancel_reason=cfg.get("PORTONE_DEFAULT_CANCEL_REASON", "취소 사유 없음"),
            tz=timezone(timedelta(hours=cfg.get("SERVICE_TIMEZONE_OFFSET_HOURS", 9))),
        )


@dataclass(frozen=True)
class ChargeResult:
    transaction_key: str
    gateway_status: Optional[str]
    entry: Optional[LedgerEntry] = None
    replayed: bool = False


@dataclass(frozen=True)
class CancelResult:
    transaction_key: str
    entry: Optional[LedgerEntry] = None


def _require_text(value, message) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value.strip()


def _require_amount(value) -> int:
    # bool 은 int 의 하위 타입이라 따로 막는다
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(_("결제 금액이 올바르지 않습니다."))
    return value


def _append_quietly(ledger: LedgerStore, entry: LedgerEntry, *, tag: str) -> Optional[LedgerEntry]:
    try:
        return ledger.append(entry)
    except PersistenceError:
        current_app.logger.exception(
            "[%s] ledger append failed after gateway success user=%s tx=%s",
            tag, entry.user_id, entry.transaction_key,
        )
        return None


def _replayable_charge(ledger: LedgerStore, user_id: str, idempotency_key: str, amount: int,
                       *, since: datetime) -> Optional[LedgerEntry]:
    """
    같은 idempotencyKey 로 이미 성공한 결제가 있으면 그 행.
    - 그 사이 취소됐거나 금액이 다르면 키는 소진된 것으로 보고 409
    """
    prior = ledger.find_by_idempotency_key(user_id, idempotency_key, since)
    if prior is None:
        return None

    latest = latest_per_transaction(
        ledger.list_for_transaction(user_id, prior.transaction_key)
    ).get(prior.transaction_key)
    if latest is None or not latest.is_paid:
        raise ValidationError(_("이미 취소된 결제의 idempotencyKey 입니다."), http_status=409)
    if prior.amount != amount:
        raise ValidationError(_("같은 idempotencyKey 로 다른 금액을 결제할 수 없습니다."), http_status=409)
    return prior


# ---------------------------------------------------------------------
# Charge
# ---------------------------------------------------------------------
def charge(ledger: LedgerStore, gateway: PortOneClient, *, principal, billing_key, user_id,
           order_name, amount, customer_id: Optional[str] = None, custom_data=None,
           idempotency_key: Optional[str] = None,
           policy: BillingPolicy = BillingPolicy(), now: Optional[datetime] = None) -> ChargeResult:
    # 1) 필수값
    billing_key = _require_text(billing_key, _("필수 데이터가 누락되었습니다."))
    order_name = _require_text(order_name, _("필수 데이터가 누락되었습니다."))
    user_id = _require_text(user_id, _("필수 데이터가 누락되었습니다."))
    amount = _require_amount(amount)

    # 2) 서버에서 검증된 주체 == 결제 대상
    if principal is None:
        raise AuthorizationError()
    if principal.id != user_id or (customer_id and customer_id != user_id):
        current_app.logger.warning(
            "[payments/charge] identity mismatch principal=%s asserted=%s", principal.id, user_id
        )
        raise AuthorizationError.forbidden()

    now = now or utcnow_naive()

    # 중복 제출(더블클릭 등) 차단
    if idempotency_key:
        prior = _replayable_charge(ledger, user_id, idempotency_key, amount,
                                   since=now - timedelta(seconds=policy.idempotency_window_seconds))
        if prior is not None:
            current_app.logger.info(
                "[payments/charge] replay idempotency_key=%s tx=%s", idempotency_key, prior.transaction_key
            )
            return ChargeResult(transaction_key=prior.transaction_key, gateway_status=prior.gateway_status,
                                entry=prior, replayed=True)

    # 3) 로컬 참조값
    payment_id = new_payment_id()

    # 4~5) 게이트웨이 호출 (실패 시 GatewayError 그대로 전파, 기록 없음)
    resp = gateway.charge_billing_key(
        payment_id,
        billing_key=billing_key,
        order_name=order_name,
        customer_id=customer_id or user_id,
        amount=amount,
        custom_data=custom_data if custom_data is not None else user_id,
    )

    gateway_status = resp.payment_status
    if gateway_status and gateway_status != "PAID":
        # 최종 정산은 별도 채널로 온다고 보고 성공 처리
        current_app.logger.warning(
            "[payments/charge] gateway status is not PAID: %s payment_id=%s", gateway_status, payment_id
        )

    transaction_key = resp.payment_id or payment_id

    # 6~7) 구독 기간 계산 + Paid 행 기록
    window = compute_window(
        now,
        period_days=policy.period_days,
        grace_days=policy.grace_days,
        renewal_hour=policy.renewal_hour,
        tz=policy.tz,
    )
    entry = _append_quietly(ledger, LedgerEntry(
        user_id=user_id,
        transaction_key=transaction_key,
        amount=amount,
        status=STATUS_PAID,
        start_at=window.start_at,
        end_at=window.end_at,
        end_grace_at=window.end_grace_at,
        next_schedule_at=window.next_schedule_at,
        next_schedule_id=new_schedule_id(),
        idempotency_key=idempotency_key,
        gateway_status=gateway_status,
    ), tag="payments/charge")

    current_app.logger.info(
        "[payments/charge] ok user=%s tx=%s status=%s recorded=%s",
        user_id, transaction_key, gateway_status, entry is not None,
    )
    return ChargeResult(transaction_key=transaction_key, gateway_status=gateway_status, entry=entry)


# ---------------------------------------------------------------------
# Cancel
# ---------------------------------------------------------------------
def cancel(ledger: LedgerStore, gateway: PortOneClient, *, principal, transaction_key,
           reason: Optional[str] = None, policy: BillingPolicy = BillingPolicy()) -> CancelResult:
    # 1) 필수값
    transaction_key = _require_text(transaction_key, _("transactionKey가 누락되었습니다."))

    # 2) 인증
    if principal is None:
        raise AuthorizationError(_("유효하지 않은 인증 정보입니다."))

    # 3) 취소 가능 여부: 내 원장에서 이 키의 최신 행이 Paid 여야 함
    #    (조회 실패는 PersistenceError 로 그대로 중단)
    entries = ledger.list_for_transaction(principal.id, transaction_key)
    latest = latest_per_transaction(entries).get(transaction_key)
    if latest is None or not latest.is_paid:
        raise NotFoundError()
    paid = latest

    # 4~5) 게이트웨이 취소
    current_app.logger.info("[payments/cancel] request tx=%s user=%s", transaction_key, principal.id)
    gateway.cancel_payment(transaction_key, reason=(reason or "").strip() or policy.default_cancel_reason)

    # 6~7) 상쇄 행 기록 (원 결제의 기간 필드 그대로, 금액 음수)
    entry = _append_quietly(ledger, LedgerEntry(
        user_id=paid.user_id,
        transaction_key=paid.transaction_key,
        amount=-paid.amount,
        status=STATUS_CANCEL,
        start_at=paid.start_at,
        end_at=paid.end_at,
        end_grace_at=paid.end_grace_at,
        next_schedule_at=paid.next_schedule_at,
        next_schedule_id=paid.next_schedule_id,
    ), tag="payments/cancel")

    current_app.logger.info(
        "[payments/cancel] ok tx=%s recorded=%s", transaction_key, entry is not None
    )
    return CancelResult(transaction_key=transaction_key, entry=entry)
