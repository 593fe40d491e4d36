from flask import jsonify, make_response


def _no_store(resp):
    # 결제/구독 응답은 중간 캐시에 남기지 않는다
    resp.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
    resp.headers["Pragma"] = "no-cache"
    resp.headers["Expires"] = "0"
    return resp


# api 공통 응답: 성공은 {"success": true, ...}
def _json_ok(payload=None, status=200):
    body = {"success": True}
    body.update(payload or {})
    return _no_store(make_response(jsonify(body), status))


# 실패는 {"success": false, "error": 메시지, "details"?: 게이트웨이 원문 등}
def _json_err(message, status=400, details=None):
    body = {"success": False, "error": str(message)}
    if details is not None:
        body["details"] = details
    return _no_store(make_response(jsonify(body), status))
