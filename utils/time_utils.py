# utils/time_utils.py
from datetime import datetime, timedelta, timezone

# 서비스 기준 시간대 (정기결제 예약 시각 계산용)
KST = timezone(timedelta(hours=9))


def utcnow_naive() -> datetime:
    # DB 컬럼은 timezone=False, 값은 항상 UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(dt):
    """naive 는 UTC 로 간주, aware 는 UTC 로 변환"""
    if dt is None:
        return None
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def isoformat_utc(dt):
    aware = as_utc(dt)
    return aware.isoformat() if aware else None
