# core/extensions.py
from authlib.integrations.flask_client import OAuth
from flask_babel import Babel
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_wtf.csrf import CSRFProtect

from core.i18n import select_locale
from domain.models import db

# 브라우저(프론트엔드)에서 직접 부르는 JSON API 경로
API_PATHS = (r"/payments*", r"/subscription/*", r"/magazines*", r"/mypage", r"/auth/*")

migrate = Migrate()
csrf = CSRFProtect()

# 저장소/기본 한도는 app.config(RATELIMIT_*) 에서 읽는다
limiter = Limiter(key_func=get_remote_address)

cors = CORS()
oauth = OAuth()
babel = Babel()


def init_extensions(app):
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    limiter.init_app(app)
    oauth.init_app(app)
    babel.init_app(app, locale_selector=select_locale)

    origins = app.config.get("CORS_ORIGINS") or []
    cors.init_app(
        app,
        supports_credentials=True,
        resources={path: {"origins": origins} for path in API_PATHS},
        methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )
