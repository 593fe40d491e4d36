from flask import current_app


def init_security_headers(app):

    @app.after_request
    def add_security_headers(resp):
        cfg = current_app.config

        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        resp.headers.setdefault("X-Frame-Options", "DENY")
        if cfg.get("ENV") != "development":
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=15552000; includeSubDomains; preload"
            )

        # JSON API + PortOne 결제창(브라우저 SDK) 만 허용
        portone = "https://*.portone.io"
        csp = (
            "default-src 'self'; "
            f"script-src 'self' https://cdn.portone.io; "
            "img-src 'self' data: https:; "
            f"frame-src {portone} https://*.kakaopay.com https://*.tosspayments.com; "
            f"connect-src 'self' {portone}; "
        )
        resp.headers.setdefault("Content-Security-Policy", csp)
        return resp
