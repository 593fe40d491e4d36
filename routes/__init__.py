# routes/__init__.py
from .api.auth_status import api_auth_status_bp
from .api.magazines import api_magazines_bp
from .api.mypage import api_mypage_bp
from .api.payments import api_payments_bp
from .api.subscription import api_subscription_bp
from .web.google_auth import google_auth_bp


def register_routes(app):
    app.register_blueprint(api_payments_bp)
    app.register_blueprint(api_subscription_bp)
    app.register_blueprint(api_mypage_bp)
    app.register_blueprint(api_magazines_bp)
    app.register_blueprint(api_auth_status_bp)
    app.register_blueprint(google_auth_bp)
