# auth/guards.py
from functools import wraps

from flask import g
from flask_babel import gettext as _

from auth.entitlements import authenticate_request, subscription_status_for
from domain.errors import AuthorizationError


def require_login(f):
    """로그인 게이트: 비로그인이면 401"""
    @wraps(f)
    def wrapper(*args, **kwargs):
        principal = authenticate_request()
        if not principal:
            raise AuthorizationError(_("로그인 후 이용 가능합니다"))
        g.principal = principal
        return f(*args, **kwargs)
    return wrapper


def require_subscription(f):
    """구독 게이트: 비로그인 401, 비구독 403"""
    @wraps(f)
    def wrapper(*args, **kwargs):
        principal = authenticate_request()
        if not principal:
            raise AuthorizationError(_("로그인 후 이용 가능합니다"))
        status = subscription_status_for(principal.id)
        if not status.active:
            raise AuthorizationError.forbidden(_("구독 후 이용 가능합니다."))
        g.principal = principal
        g.subscription = status
        return f(*args, **kwargs)
    return wrapper
