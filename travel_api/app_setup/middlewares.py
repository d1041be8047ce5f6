from fastapi import Request, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from travel_api import config

"""
Middlewares transverses de l’application.
- register_basic_middlewares: CORS restreint aux origines configurées (toutes si liste vide).
- register_security_middleware: en-têtes de sécurité façon helmet + CSP minimale.
Notes:
- Le webhook Stripe n'est soumis à aucun contrôle de contenu: il lit le corps brut.
"""
def register_basic_middlewares(app: FastAPI) -> None:
    """
    Ajoute CORSMiddleware.
    - CORS_ALLOWED_ORIGINS vide => toutes origines (dev, site statique servi ailleurs)
    """
    origins = config.CORS_ALLOWED_ORIGINS or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )


def register_security_middleware(app: FastAPI) -> None:
    """
    Middleware de sécurité:
    - En-têtes: X-Frame-Options, X-Content-Type-Options, Referrer-Policy, Permissions-Policy, HSTS (si secure).
    - CSP: restreint script/connect; autorise la redirection vers Checkout Stripe.
    """
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)

        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
        if config.COOKIE_SECURE:
            response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload")

        swagger_cdns = ["https://cdn.jsdelivr.net", "https://unpkg.com"]
        csp = (
            "default-src 'self'; "
            "base-uri 'self'; object-src 'none'; frame-ancestors 'none'; "
            "img-src 'self' data: https://fastapi.tiangolo.com https://images.unsplash.com; "
            f"style-src 'self' 'unsafe-inline' {' '.join(swagger_cdns)}; "
            f"script-src 'self' 'unsafe-inline' {' '.join(swagger_cdns)}; "
            "connect-src 'self'; "
            "form-action 'self' https://checkout.stripe.com"
        )
        response.headers.setdefault("Content-Security-Policy", csp)
        return response
