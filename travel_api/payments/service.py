"""
Cas d'usage 'payments': orchestre checkout, client Stripe, catalogue, webhooks et idempotence.
Aucun état local: la session vit entièrement chez Stripe.
"""
import logging
from typing import Any, Dict, Optional

from travel_api.currency import RateTable
from . import checkout as checkout_logic
from .catalog import PackageCatalog
from .errors import InvalidRequest
from .metadata import extract_booking
from .stripe_client import StripeGateway
from .webhooks import WebhookDispatcher

logger = logging.getLogger(__name__)

# Écart toléré entre le montant affiché côté client et le prix catalogue
PRICE_MISMATCH_TOLERANCE = 0.01

# module travel_api.payments.service
def resolve_amount(
    request: checkout_logic.CheckoutRequest,
    catalog: PackageCatalog,
    table: RateTable,
    strict: bool = False,
) -> checkout_logic.CheckoutRequest:
    """
    Détermine le montant facturé.
    - Forfait connu: prix catalogue converti dans la devise demandée (le montant client
      n'est qu'un indice d'affichage; un écart est loggé).
    - Forfait inconnu: InvalidRequest si strict, sinon montant client.
    """
    quoted = catalog.quote(request.package_id, request.currency, table)
    if quoted is None:
        if strict:
            raise InvalidRequest(f"Unknown package: {request.package_id}")
        return request
    if abs(quoted - request.amount) > PRICE_MISMATCH_TOLERANCE:
        logger.warning(
            "payments.checkout client amount mismatch package=%s currency=%s client=%.2f catalog=%.2f",
            request.package_id, request.currency, request.amount, quoted,
        )
    return checkout_logic.CheckoutRequest(
        package_id=request.package_id,
        package_name=request.package_name,
        amount=quoted,
        quantity=request.quantity,
        currency=request.currency,
    )


def create_checkout_session(
    body: Dict[str, Any],
    *,
    gateway: StripeGateway,
    catalog: PackageCatalog,
    table: RateTable,
    frontend_url: str,
    strict_pricing: bool = False,
) -> Dict[str, Any]:
    """
    Crée une session Checkout pour un forfait.
    Étapes:
      1) Vérifier que Stripe est configuré (avant toute I/O)
      2) Valider la requête (checkout.parse_checkout_request)
      3) Fixer le montant faisant foi (resolve_amount)
      4) Créer la session et renvoyer {sessionId, url}
    """
    gateway.require_configured()
    request = checkout_logic.parse_checkout_request(body, table)
    request = resolve_amount(request, catalog, table, strict=strict_pricing)
    params = checkout_logic.build_session_params(request, frontend_url)
    session = gateway.create_session(**params)
    logger.info(
        "payments.checkout session created id=%s package=%s amount=%.2f %s x%s",
        session.get("id"), request.package_id, request.amount, request.currency, request.quantity,
    )
    return {"sessionId": session.get("id"), "url": session.get("url")}


async def handle_webhook(
    payload: bytes,
    signature: Optional[str],
    *,
    gateway: StripeGateway,
    dispatcher: WebhookDispatcher,
    store,
) -> Dict[str, Any]:
    """
    Vérifie puis dispatch un webhook Stripe.
    - Signature invalide => SignatureInvalid (aucun dispatch)
    - Event déjà traité (même id) => acquitté sans nouveau dispatch
    - Échec d'un handler => loggé, event oublié du store pour permettre un renvoi manuel
    - Store d'idempotence en panne => loggé, event traité quand même (pas de 500)
    Retour: {"received": True} dès que la signature est valide.
    """
    event = gateway.verify_event(payload, signature)
    event_id = event.get("id")
    event_type = event.get("type")

    if not dispatcher.handles(event_type):
        await dispatcher.dispatch(event)
        return {"received": True}

    first_sighting = True
    if event_id:
        try:
            first_sighting = await store.mark_processed(event_id, provider=gateway.provider)
        except Exception:
            # Store indisponible: on traite quand même (le sink déduplique sur session_id)
            logger.exception("payments.webhook idempotency store unavailable type=%s id=%s", event_type, event_id)
    if not first_sighting:
        logger.info("payments.webhook duplicate delivery ignored type=%s id=%s", event_type, event_id)
        return {"received": True}

    try:
        await dispatcher.dispatch(event)
        logger.info("payments.webhook processed type=%s id=%s", event_type, event_id)
    except Exception:
        logger.exception("payments.webhook handler failed type=%s id=%s", event_type, event_id)
        if event_id:
            try:
                await store.forget(event_id, provider=gateway.provider)
            except Exception:
                logger.exception("payments.webhook could not forget event id=%s", event_id)
    return {"received": True}


def get_session_status(session_id: str, *, gateway: StripeGateway) -> Dict[str, Any]:
    """
    Lecture seule de l'état d'une session Checkout.
    Retour: {status, customerEmail, amountTotal (unités majeures), metadata}
    """
    if not (session_id or "").strip():
        raise InvalidRequest("sessionId is required")
    session = gateway.retrieve_session(session_id)
    amount_total = session.get("amount_total")
    return {
        "status": session.get("payment_status"),
        "customerEmail": extract_booking(session).get("customer_email"),
        "amountTotal": amount_total / 100 if amount_total is not None else None,
        "metadata": session.get("metadata") or {},
    }
