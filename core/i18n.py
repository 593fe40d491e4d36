from flask import current_app, has_request_context, request, session


def select_locale() -> str:
    """
    응답 메시지 언어 선택.
    1) ?lang=en
    2) 세션/쿠키 lang
    3) Accept-Language 헤더
    4) 기본값 ko
    """
    supported = current_app.config.get("LANGUAGES", ["ko", "en"])
    if not has_request_context():
        # CLI / 서비스 함수 직접 호출
        return current_app.config.get("BABEL_DEFAULT_LOCALE", supported[0])

    q = request.args.get("lang", "").strip().lower()
    if q in supported:
        return q

    saved = (session.get("lang") or request.cookies.get("lang") or "").strip().lower()
    if saved in supported:
        return saved

    return request.accept_languages.best_match(supported) or supported[0]
