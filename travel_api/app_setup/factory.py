"""
Factory d’application recommandée pour les entrypoints (ex: travel_api.asgi).
Ordonne les étapes d’initialisation de manière lisible et testable.
"""
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_security_middleware
from .exception_handlers import register_exception_handlers
from .routes import register_routes
from .routers import register_routers


def create_app() -> FastAPI:
    """
    Construit l’app FastAPI avec le lifespan et enregistre:
      - middlewares (CORS, en-têtes de sécurité)
      - gestionnaires d’exceptions et routes simples
      - tous les routers (payment, health)
    Retour:
      FastAPI prêt à être utilisé par le serveur ASGI.
    """
    app = FastAPI(title="Travel Agency API", lifespan=lifespan)
    register_security_middleware(app)
    register_basic_middlewares(app)
    register_exception_handlers(app)
    register_routes(app)
    register_routers(app)
    return app
