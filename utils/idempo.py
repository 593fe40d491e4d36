# utils/idempo.py
import secrets
import string
import time
import uuid

_BASE36 = string.digits + string.ascii_lowercase


def new_payment_id(prefix: str = "payment") -> str:
    """
    PortOne paymentId 용 로컬 참조값: payment_<epoch ms>_<base36 7자리>
    게이트웨이가 최종 id 를 돌려주므로 암호학적 유일성은 필요 없음.
    """
    suffix = "".join(secrets.choice(_BASE36) for _ in range(7))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def new_schedule_id() -> str:
    return str(uuid.uuid4())
