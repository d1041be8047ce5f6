# travel_api.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
PACKAGE_DIR = Path(__file__).resolve().parent
BASE_DIR = PACKAGE_DIR.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH)

PUBLIC_DIR = BASE_DIR / "public"
DATA_DIR = PACKAGE_DIR / "data"

"""
Configuration centrale du backend.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Expose les chemins utiles (PUBLIC_DIR, DATA_DIR)
- Normalise et expose les secrets Stripe, l'origine du front (redirections checkout),
  la devise de base, le catalogue des forfaits, le store d'idempotence et la config CORS/rate limit
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _env_int(name: str, default: int) -> int:
    raw = _clean_env(os.getenv(name) or "")
    try:
        return int(raw) if raw else default
    except ValueError:
        return default

def _env_flag(name: str, default: bool = False) -> bool:
    raw = _clean_env(os.getenv(name) or "").lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")

# Stripe: clé secrète et secret de signature webhook
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")
STRIPE_WEBHOOK_TOLERANCE = _env_int("STRIPE_WEBHOOK_TOLERANCE", 300)

# Origine du site vitrine: base des URLs success/cancel du checkout
FRONTEND_URL = _clean_env(os.getenv("FRONTEND_URL") or "http://localhost:5500")

# Devise de référence des prix catalogue (taux = 1)
BASE_CURRENCY = _clean_env(os.getenv("BASE_CURRENCY") or "USD").upper()

# Catalogue des forfaits (prix canoniques en devise de base)
PACKAGES_FILE = Path(_clean_env(os.getenv("PACKAGES_FILE") or "") or DATA_DIR / "packages.json")
# true => un forfait inconnu du catalogue est refusé (400) au lieu d'utiliser le montant client
STRICT_PACKAGE_PRICING = _env_flag("STRICT_PACKAGE_PRICING", False)

# Idempotence des webhooks: Redis si une URL est fournie, sinon store mémoire du process
IDEMPOTENCY_REDIS_URL = _clean_env(os.getenv("IDEMPOTENCY_REDIS_URL") or "")
IDEMPOTENCY_TTL_SECONDS = _env_int("IDEMPOTENCY_TTL_SECONDS", 60 * 60 * 24)

# CORS: liste vide => toutes origines autorisées (comportement dev)
CORS_ALLOWED_ORIGINS = [o.strip() for o in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",") if o.strip()]

# Rate limit global /api/* (fenêtre de 15 minutes par défaut)
API_RATE_LIMIT = _env_int("API_RATE_LIMIT", 200)
API_RATE_WINDOW = _env_int("API_RATE_WINDOW", 15 * 60)

# Sécurité: active HSTS derrière HTTPS
COOKIE_SECURE = _env_flag("COOKIE_SECURE", False)
