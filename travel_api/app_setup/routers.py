"""
Registre central des routers.
- API: payment (checkout, webhook, session, devises)
- Health: health_router
"""
from fastapi import FastAPI
from travel_api.payments import views as payments_views
from travel_api.health.router import router as health_router


def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l’application.
    - L’ordre n’a pas d’impact sauf conflits de chemins (évités par préfixes).
    """
    app.include_router(payments_views.router)
    app.include_router(health_router)
