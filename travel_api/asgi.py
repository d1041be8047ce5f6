"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (ex: gunicorn/uvicorn-workers) importe `travel_api.asgi:app`
  pour servir l’application FastAPI en mode ASGI.
- Toute la configuration de FastAPI (routes, middlewares, erreurs, etc.) est centralisée
  dans travel_api.app_setup, ce fichier ne fait qu’exposer l’instance `app`.
"""

from travel_api.app import app

if __name__ == "__main__":
    # Exécution directe utile en développement local (uvicorn standalone).
    import os
    import uvicorn
    uvicorn.run(
        "travel_api.asgi:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "4000")),
        reload=True,
    )
