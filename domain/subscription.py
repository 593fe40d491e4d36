# domain/subscription.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, Optional

from domain.ledger import LedgerEntry, STATUS_PAID


@dataclass(frozen=True)
class SubscriptionStatus:
    active: bool
    active_transaction_key: Optional[str] = None

    @property
    def status_message(self) -> str:
        return "구독중" if self.active else "Free"


INACTIVE = SubscriptionStatus(active=False)


def latest_per_transaction(entries: Iterable[LedgerEntry]) -> Dict[str, LedgerEntry]:
    """
    transaction_key 별로 created_at 이 가장 큰 행 1건씩.
    created_at 이 같으면 먼저 들어온 행(입력 순서상 앞)을 유지한다.
    """
    latest: Dict[str, LedgerEntry] = {}
    for entry in entries:
        cur = latest.get(entry.transaction_key)
        if cur is None or entry.created_at > cur.created_at:
            latest[entry.transaction_key] = entry
    return latest


def evaluate(entries: Iterable[LedgerEntry], now: datetime) -> SubscriptionStatus:
    """
    원장 -> 현재 구독 상태.
      1) transaction_key 로 그룹화, 그룹마다 최신 1건
      2) status == Paid and start_at <= now <= end_grace_at
      3) 1건 이상이면 구독중, 첫 번째 후보의 transaction_key 반환
    순수 함수. 호출마다 다시 계산한다 (캐시 금지).
    """
    for entry in latest_per_transaction(entries).values():
        if entry.status != STATUS_PAID:
            continue
        if entry.start_at <= now <= entry.end_grace_at:
            return SubscriptionStatus(active=True, active_transaction_key=entry.transaction_key)
    return INACTIVE
