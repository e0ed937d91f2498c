"""
Middlewares transverses de l’application.
- register_basic_middlewares: session signée (état du flux de confirmation), CORS, TrustedHost,
  confiance en X-Forwarded-*.
- register_payment_preflight: préflight CORS de /api/create-payment (204).
- register_security_headers: en-têtes de sécurité et CSP (connect-src inclut Supabase et Stripe).
"""
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from starlette.middleware.sessions import SessionMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware
from laundry.config import SUPABASE_URL, COOKIE_SECURE, CORS_ORIGINS, ALLOWED_HOSTS, SESSION_SECRET_KEY
from laundry.payments.views import PAYMENT_PATH, CORS_HEADERS

def register_basic_middlewares(app: FastAPI) -> None:
    app.add_middleware(
        SessionMiddleware,
        secret_key=SESSION_SECRET_KEY,
        https_only=COOKIE_SECURE,
        same_site="lax",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=ALLOWED_HOSTS + ["*"] if "*" in CORS_ORIGINS else ALLOWED_HOSTS,
    )
    # Fait confiance aux en-têtes X-Forwarded-* (Render, Nginx, etc.)
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

def register_security_headers(app: FastAPI) -> None:
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if COOKIE_SECURE:
            response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload")

        csp_connect = ["'self'", "https://api.stripe.com"]
        if SUPABASE_URL:
            csp_connect.append(SUPABASE_URL.rstrip("/"))
        swagger_cdns = ["https://cdn.jsdelivr.net", "https://unpkg.com"]
        csp = (
            "default-src 'self'; "
            "base-uri 'self'; object-src 'none'; frame-ancestors 'none'; "
            "img-src 'self' data: https://fastapi.tiangolo.com; "
            f"style-src 'self' 'unsafe-inline' {' '.join(swagger_cdns)}; "
            f"script-src 'self' 'unsafe-inline' {' '.join(swagger_cdns)}; "
            f"connect-src {' '.join(csp_connect + swagger_cdns)}"
        )
        response.headers.setdefault("Content-Security-Policy", csp)
        return response

def register_payment_preflight(app: FastAPI) -> None:
    """
    Préflight du paiement hébergé: 204 sans corps avec les en-têtes CORS de l'endpoint,
    y compris pour un préflight navigateur (Origin + Access-Control-Request-Method)
    que CORSMiddleware intercepterait sinon avec un 200.
    """
    @app.middleware("http")
    async def payment_preflight(request: Request, call_next):
        if request.method == "OPTIONS" and request.url.path == PAYMENT_PATH:
            return Response(status_code=204, headers=CORS_HEADERS)
        return await call_next(request)
