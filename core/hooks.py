from flask import abort, current_app, request
from flask_babel import gettext as _
from werkzeug.exceptions import HTTPException

from auth.entitlements import load_current_user
from core.http_utils import _json_err
from domain.errors import GatewayError, PaymentError


def load_user():
    load_current_user()


def guard_payload_size():
    if request.content_length and request.content_length > 256 * 1024:
        abort(413)


# -------------------- 에러 → JSON --------------------

def handle_payment_error(e: PaymentError):
    if e.http_status >= 500:
        current_app.logger.error("[%s] %s %s details=%s", e.code, request.method, request.path, e.details)
    else:
        current_app.logger.info("[%s] %s %s status=%s", e.code, request.method, request.path, e.http_status)
    # 응답 details 는 게이트웨이 원문만. 나머지는 로그 전용
    details = e.details if isinstance(e, GatewayError) else None
    return _json_err(e.message, e.http_status, details)


def handle_http_exception(e: HTTPException):
    return _json_err(e.description or e.name, e.code or 500)


def handle_unexpected(e: Exception):
    # 경계 밖으로 예외를 던지지 않는다: 나머지는 전부 일반 500
    current_app.logger.exception("[unhandled] %s %s: %r", request.method, request.path, e)
    return _json_err(_("서버 오류가 발생했습니다."), 500)


def register_hooks(app):
    app.before_request(load_user)
    app.before_request(guard_payload_size)

    app.register_error_handler(PaymentError, handle_payment_error)
    app.register_error_handler(HTTPException, handle_http_exception)
    app.register_error_handler(Exception, handle_unexpected)
