from datetime import timedelta

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

import routes
from core.config import Config
from core.extensions import init_extensions
from core.hooks import register_hooks
from domain.ledger import LedgerStore
from domain.models import db
from security.headers import init_security_headers
from services.portone import PortOneClient


def _init_payment_backends(app, *, portone_client=None, ledger=None):
    # 요청마다 새로 만들지 않는다. 라우트는 app.extensions 에서 꺼내 서비스에 넘긴다
    app.extensions["ledger"] = ledger or LedgerStore(db)
    app.extensions["portone"] = portone_client or PortOneClient.from_config(app.config)

    app.logger.info(
        "[portone] api_base=%s secret_configured=%s timeout=%ss",
        app.config.get("PORTONE_API_BASE"),
        bool(app.config.get("PORTONE_API_SECRET")),
        app.config.get("PORTONE_TIMEOUT_SECONDS"),
    )


def create_app(config_object=Config, *, portone_client=None, ledger=None):
    app = Flask(__name__)
    app.config.from_object(config_object)

    assert app.config.get("SECRET_KEY"), \
        "SECURITY: 환경변수 SECRET_KEY를 강력한 값으로 설정하세요."

    init_extensions(app)
    init_security_headers(app)

    # 세션 쿠키: https 배포에서는 Secure
    app.config.update(
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        SESSION_COOKIE_SECURE=(app.config.get("ENV") != "development"),
        PERMANENT_SESSION_LIFETIME=timedelta(days=30),
    )

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    _init_payment_backends(app, portone_client=portone_client, ledger=ledger)

    routes.register_routes(app)
    register_hooks(app)

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    return app
