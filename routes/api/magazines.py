# routes/api/magazines.py
from flask import Blueprint, abort, g
from flask_babel import gettext as _

from auth.guards import require_login, require_subscription
from core.extensions import csrf
from core.http_utils import _json_ok
from domain.models import db, Magazine
from domain.schema import magazine_create_schema
from security.input import require_json_input
from utils.time_utils import isoformat_utc

api_magazines_bp = Blueprint("api_magazines", __name__)


def _summary(m: Magazine) -> dict:
    return {
        "id": m.id,
        "category": m.category,
        "title": m.title,
        "description": m.description,
        "tags": m.tags or [],
        "image_url": m.image_url,
        "created_at": isoformat_utc(m.created_at),
    }


# 목록은 누구나
@csrf.exempt
@api_magazines_bp.route("/magazines", methods=["GET"])
def list_magazines():
    rows = Magazine.query.order_by(Magazine.created_at.desc(), Magazine.id.desc()).all()
    return _json_ok({"items": [_summary(m) for m in rows]})


# 본문은 구독자만
@csrf.exempt
@api_magazines_bp.route("/magazines/<int:magazine_id>", methods=["GET"])
@require_subscription
def get_magazine(magazine_id: int):
    m = db.session.get(Magazine, magazine_id)
    if not m:
        abort(404, description=_("매거진을 찾을 수 없습니다."))
    return _json_ok({"item": {**_summary(m), "content": m.content}})


# 글쓰기는 로그인 사용자
@csrf.exempt
@api_magazines_bp.route("/magazines", methods=["POST"])
@require_login
@require_json_input(magazine_create_schema)
def create_magazine():
    body = g.json_input
    m = Magazine(
        category=body["category"],
        title=body["title"].strip(),
        description=body["description"].strip(),
        content=body["content"],
        tags=body.get("tags") or None,
        image_url=body.get("image_url") or None,
        author_id=g.principal.id,
    )
    db.session.add(m)
    db.session.commit()
    return _json_ok({"item": _summary(m)}, status=201)
