# utils/billing_dates.py
import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from dateutil.relativedelta import relativedelta

from utils.time_utils import KST, as_utc


def to_utc_naive(dt_aware: datetime) -> datetime:
    """aware datetime -> naive UTC datetime (DB timezone=False 전제)"""
    return dt_aware.astimezone(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class SubscriptionWindow:
    start_at: datetime
    end_at: datetime
    end_grace_at: datetime
    next_schedule_at: datetime


def next_schedule_kst(end_at_utc: datetime, *, hour: int = 10, minute: Optional[int] = None,
                      tz=KST) -> datetime:
    """
    만료 다음날 hour:MM (서비스 시간대 기준). 분은 0~59 랜덤으로 흩뿌려
    같은 시각에 갱신 결제가 몰리지 않게 한다.
    """
    if minute is None:
        minute = random.randint(0, 59)
    local_end = as_utc(end_at_utc).astimezone(tz)
    return local_end + relativedelta(days=+1, hour=hour, minute=minute, second=0, microsecond=0)


def compute_window(now_utc: datetime, *, period_days: int = 30, grace_days: int = 1,
                   renewal_hour: int = 10, tz=KST, minute: Optional[int] = None) -> SubscriptionWindow:
    """
    결제 성공 시각(naive UTC) 기준 구독 기간.
    - end_at = now + period_days
    - end_grace_at = end_at + grace_days (갱신 지연 흡수용 유예)
    """
    end_at = now_utc + timedelta(days=period_days)
    return SubscriptionWindow(
        start_at=now_utc,
        end_at=end_at,
        end_grace_at=end_at + timedelta(days=grace_days),
        next_schedule_at=to_utc_naive(next_schedule_kst(end_at, hour=renewal_hour, minute=minute, tz=tz)),
    )
