"""
Gestionnaires d’exceptions de l'application.
- PaymentError: statut porté par l'erreur + {"error": code, "message": ...[, "detail": ...]}
- HTTPException: body JSON FastAPI standard {"detail": ...} (404 de routage, 429 rate limit)
- Exception inattendue: 500 JSON, loggée; le process ne tombe jamais
"""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from travel_api.payments.errors import PaymentError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre les handlers au niveau de l'app (frontière des handlers HTTP).
    """
    @app.exception_handler(PaymentError)
    async def payment_error_handler(request: Request, exc: PaymentError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s (%s)", request.method, request.url.path, exc.code, exc.message, exc.detail)
        else:
            logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "internal_error", "message": "Internal server error"},
        )
