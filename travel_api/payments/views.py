import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from travel_api import config
from travel_api.currency import RateTable, get_rate_table
from travel_api.utils.rate_limit import optional_rate_limit
from travel_api.payments import service as payments_service
from travel_api.payments.catalog import PackageCatalog, get_package_catalog
from travel_api.payments.errors import InvalidRequest
from travel_api.payments.idempotency import MemoryProcessedEventStore
from travel_api.payments.stripe_client import StripeGateway, get_payment_gateway
from travel_api.payments.webhooks import WebhookDispatcher, get_webhook_dispatcher

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/payment", tags=["Payment API"])


def get_event_store(request: Request):
    """
    Store d'idempotence partagé par l'app (initialisé par le lifespan).
    Fallback mémoire si l'app tourne sans lifespan.
    """
    store = getattr(request.app.state, "event_store", None)
    if store is None:
        store = MemoryProcessedEventStore()
        request.app.state.event_store = store
    return store

# module travel_api.payments.views
@router.post("/create-checkout-session", dependencies=[Depends(optional_rate_limit())])
async def create_checkout_session(
    request: Request,
    gateway: StripeGateway = Depends(get_payment_gateway),
    catalog: PackageCatalog = Depends(get_package_catalog),
    table: RateTable = Depends(get_rate_table),
):
    """
    Crée une session Checkout Stripe pour un forfait.
    - Entrée JSON: {"packageId", "packageName", "amount", "quantity"?, "currency"?}
    - Réponse: {"sessionId", "url"} (url hébergée par Stripe)
    - Erreurs: 400 champs manquants/invalides, 500 Stripe non configuré ou en échec
    """
    gateway.require_configured()
    try:
        body: Dict[str, Any] = await request.json()
    except ValueError:
        raise InvalidRequest("Request body must be valid JSON")
    result = payments_service.create_checkout_session(
        body,
        gateway=gateway,
        catalog=catalog,
        table=table,
        frontend_url=config.FRONTEND_URL,
        strict_pricing=config.STRICT_PACKAGE_PRICING,
    )
    return JSONResponse(result)


@router.post("/webhook", include_in_schema=False)
async def payment_webhook(
    request: Request,
    gateway: StripeGateway = Depends(get_payment_gateway),
    dispatcher: WebhookDispatcher = Depends(get_webhook_dispatcher),
    store=Depends(get_event_store),
):
    """
    Webhook Stripe: corps brut + en-tête Stripe-Signature.
    - 200 {"received": true} dès que la signature est valide (quel que soit le traitement)
    - 400 signature invalide, 500 webhook non configuré
    """
    payload = await request.body()
    signature = request.headers.get("stripe-signature")
    result = await payments_service.handle_webhook(
        payload,
        signature,
        gateway=gateway,
        dispatcher=dispatcher,
        store=store,
    )
    return JSONResponse(result)


@router.get("/session/{session_id}", dependencies=[Depends(optional_rate_limit())])
def get_checkout_session(session_id: str, gateway: StripeGateway = Depends(get_payment_gateway)):
    """
    Détails d'une session Checkout: {status, customerEmail, amountTotal, metadata}.
    - 404 session inconnue, 500 Stripe non configuré ou en échec
    """
    return JSONResponse(payments_service.get_session_status(session_id, gateway=gateway))


@router.get("/currencies")
def list_currencies(table: RateTable = Depends(get_rate_table)) -> Dict[str, Any]:
    """Table de taux utilisée pour la conversion côté client: {base, rates}."""
    return table.as_dict()
