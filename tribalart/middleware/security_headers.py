from fastapi import Request

from tribalart.config import settings


def add_security_headers(app):
    @app.middleware("http")
    async def security_headers_mw(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # product images are embedded by the storefront, pages never are
        if not request.url.path.startswith(settings.PUBLIC_BASE_URL):
            response.headers["X-Frame-Options"] = "DENY"
        if settings.ENV == "production":
            response.headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains"
        return response
