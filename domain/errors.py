# domain/errors.py
from typing import Any, Dict, Optional

from flask_babel import lazy_gettext as _


class PaymentError(Exception):
    """
    결제/구독 흐름의 공통 예외.
    - code: 로그/클라이언트 분기용 코드
    - message: 사용자에게 보여줄 문장
    - http_status: API 응답 상태코드
    - details: 원인 payload(게이트웨이 응답 등), 진단용
    """
    code = "payment_error"
    default_message = _("서버 오류가 발생했습니다.")
    http_status = 500

    def __init__(self, message=None, *, http_status: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        if http_status is not None:
            self.http_status = http_status
        self.details = details
        super().__init__(str(self.message))


class ValidationError(PaymentError):
    code = "validation_error"
    default_message = _("필수 데이터가 누락되었습니다.")
    http_status = 400


class AuthorizationError(PaymentError):
    """401: 자격 증명 없음/무효, 403: 인증 주체와 요청 주체 불일치"""
    code = "authorization_error"
    default_message = _("인증되지 않은 사용자입니다.")
    http_status = 401

    @classmethod
    def forbidden(cls, message=None):
        return cls(message or _("결제 권한이 없습니다."), http_status=403)


class NotFoundError(PaymentError):
    code = "not_found"
    default_message = _("취소할 수 있는 결제 정보를 찾을 수 없습니다.")
    http_status = 404


class GatewayError(PaymentError):
    """PortOne 이 거절/실패. 상태코드와 응답 payload 를 그대로 전달"""
    code = "gateway_error"
    default_message = _("결제 처리 중 오류가 발생했습니다.")
    http_status = 502

    def __init__(self, message=None, *, status_code: int = 502, payload=None):
        super().__init__(message, http_status=status_code, details=payload)
        self.status_code = status_code
        self.payload = payload


class ConfigurationError(PaymentError):
    code = "configuration_error"
    http_status = 500


class PersistenceError(PaymentError):
    code = "persistence_error"
    default_message = _("결제 정보 조회 중 오류가 발생했습니다.")
    http_status = 500
