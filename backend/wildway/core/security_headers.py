"""HTTP security headers middleware."""

from __future__ import annotations

from fastapi import FastAPI, Request

from wildway.core.config import Settings

API_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-site",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'; base-uri 'none'",
}


def install_security_headers_middleware(app: FastAPI, settings: Settings) -> None:
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):  # type: ignore[override]
        response = await call_next(request)

        if (request.url.path or "").startswith("/api"):
            for name, value in API_SECURITY_HEADERS.items():
                response.headers.setdefault(name, value)
            # Session-bearing responses must never be cached by intermediaries.
            response.headers.setdefault("Cache-Control", "no-store")
            if settings.is_production:
                response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response
