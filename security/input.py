"""
security/input.py: JSON 입력 검증 데코레이터
"""
from functools import wraps

from flask import request, g
from flask_babel import gettext as _
from jsonschema import validate, ValidationError as SchemaError

from domain.errors import ValidationError

# -------------------- 설정 상수 --------------------
MAX_PAYLOAD_BYTES = 64 * 1024


def _validate_schema(data, schema):
    """JSON Schema 검증 (타입, 길이 등)"""
    if not schema:
        return
    try:
        validate(instance=data, schema=schema)
    except SchemaError as e:
        raise ValidationError(_("유효성 검사 실패: %(reason)s", reason=e.message)) from e


def require_json_input(json_schema=None):
    """
    JSON 본문을 파싱/검증해서 g.json_input 에 넣는다.
      - 본문이 JSON 객체가 아니면 400
      - json_schema 위반이면 400
    """
    def deco(f):
        @wraps(f)
        def wrapped(*args, **kwargs):
            cl = request.content_length
            if cl and cl > MAX_PAYLOAD_BYTES:
                raise ValidationError(_("요청 본문이 너무 큽니다."), http_status=413)

            payload = request.get_json(silent=True)
            if not isinstance(payload, dict):
                raise ValidationError(_("JSON 요청이 필요합니다."))

            _validate_schema(payload, json_schema)
            g.json_input = payload
            return f(*args, **kwargs)
        return wrapped
    return deco
