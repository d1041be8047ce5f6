"""
Routes simples (hors routers) pour la page d’accueil.
- Sert / (et /index.html) depuis public/index.html si présent, sinon 404 JSON.
- /favicon.ico: pas de contenu (204) pour éviter des 404 dans les logs.
"""
from fastapi import FastAPI, HTTPException
from fastapi.responses import FileResponse, Response
from starlette.status import HTTP_204_NO_CONTENT
from travel_api.config import PUBLIC_DIR


def _index_response():
    index_path = PUBLIC_DIR / "index.html"
    if index_path.exists():
        return FileResponse(str(index_path))
    raise HTTPException(status_code=404, detail="index.html introuvable")


def register_routes(app: FastAPI) -> None:
    """
    Enregistre les routes racine et alias de l’accueil.
    - Laisse l’OpenAPI propre (include_in_schema=False).
    """
    @app.get("/", include_in_schema=False)
    def root():
        return _index_response()

    @app.get("/index.html", include_in_schema=False)
    def index_alias():
        return _index_response()

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        return Response(status_code=HTTP_204_NO_CONTENT)
