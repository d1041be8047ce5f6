"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
Le client est un objet construit (clé passée par requête, pas de stripe.api_key global),
injecté dans les handlers via la dépendance get_payment_gateway.
"""
import json
import logging
from typing import Any, Dict, Optional

import stripe

from .errors import NotFound, PaymentProviderError, ServiceNotConfigured, SignatureInvalid

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "Payment service not configured. Please add STRIPE_SECRET_KEY to environment variables."
WEBHOOK_NOT_CONFIGURED_MESSAGE = "Webhook not configured. Please add STRIPE_WEBHOOK_SECRET to environment variables."


def _to_plain(obj: Any) -> Dict[str, Any]:
    """
    Convertit un StripeObject (ou un dict) en dict Python récursif.
    """
    for attr in ("to_dict", "to_dict_recursive"):
        fn = getattr(obj, attr, None)
        if callable(fn):
            return fn()
    return dict(obj)

# module travel_api.payments.stripe_client
class StripeGateway:
    """
    Client Stripe Checkout.
    - api_key: clé secrète (STRIPE_SECRET_KEY); vide => ServiceNotConfigured
    - webhook_secret: secret de signature (STRIPE_WEBHOOK_SECRET)
    - tolerance: tolérance (s) sur l'horodatage de signature
    """

    provider = "stripe"

    def __init__(self, api_key: str, webhook_secret: str = "", tolerance: int = 300):
        self.api_key = api_key or ""
        self.webhook_secret = webhook_secret or ""
        self.tolerance = tolerance

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def require_configured(self) -> None:
        """Échoue avant toute I/O réseau si la clé secrète manque."""
        if not self.configured:
            raise ServiceNotConfigured(NOT_CONFIGURED_MESSAGE)

    def create_session(self, **params: Any) -> Dict[str, Any]:
        """
        Crée une session Stripe Checkout.
        Retour: dict session (ex: {"id": "cs_test_...", "url": "https://checkout.stripe.com/..."})
        """
        self.require_configured()
        try:
            session = stripe.checkout.Session.create(api_key=self.api_key, **params)
        except stripe.StripeError as e:
            logger.exception("payments.stripe create_session failed")
            raise PaymentProviderError("Failed to create checkout session", detail=_provider_message(e))
        return _to_plain(session)

    def retrieve_session(self, session_id: str) -> Dict[str, Any]:
        """
        Récupère une session Checkout par son identifiant.
        - Session inconnue côté Stripe => NotFound
        """
        self.require_configured()
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.api_key)
        except stripe.InvalidRequestError as e:
            if getattr(e, "code", None) == "resource_missing" or getattr(e, "http_status", None) == 404:
                raise NotFound(f"Checkout session {session_id} not found")
            logger.exception("payments.stripe retrieve_session failed id=%s", session_id)
            raise PaymentProviderError("Failed to retrieve session", detail=_provider_message(e))
        except stripe.StripeError as e:
            logger.exception("payments.stripe retrieve_session failed id=%s", session_id)
            raise PaymentProviderError("Failed to retrieve session", detail=_provider_message(e))
        return _to_plain(session)

    def verify_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """
        Valide un événement signé (webhook) et retourne l'event sous forme de dict.
        - payload: corps brut, octets exacts reçus (la signature porte dessus)
        - signature: en-tête Stripe-Signature
        """
        if not self.configured or not self.webhook_secret:
            raise ServiceNotConfigured(WEBHOOK_NOT_CONFIGURED_MESSAGE)
        try:
            text = payload.decode("utf-8") if isinstance(payload, (bytes, bytearray)) else str(payload or "")
        except UnicodeDecodeError:
            raise SignatureInvalid("Webhook payload is not valid UTF-8")
        if not signature:
            logger.warning("payments.webhook missing Stripe-Signature header")
            raise SignatureInvalid("Webhook Error: missing Stripe-Signature header")
        try:
            stripe.WebhookSignature.verify_header(text, signature, self.webhook_secret, self.tolerance)
        except stripe.SignatureVerificationError as e:
            logger.warning("payments.webhook signature verification failed: %s (header=%r)", e, signature)
            raise SignatureInvalid(f"Webhook Error: {_provider_message(e)}")
        try:
            event = json.loads(text)
        except ValueError:
            logger.warning("payments.webhook signed payload is not JSON (len=%s)", len(text))
            raise SignatureInvalid("Webhook Error: invalid payload")
        if not isinstance(event, dict):
            raise SignatureInvalid("Webhook Error: invalid payload")
        return event


def _provider_message(error: Exception) -> str:
    return getattr(error, "user_message", None) or str(error) or error.__class__.__name__


def get_payment_gateway() -> StripeGateway:
    """
    Dépendance FastAPI: construit le client à partir de la configuration courante.
    Surchargée dans les tests via app.dependency_overrides.
    """
    from travel_api import config

    return StripeGateway(
        api_key=config.STRIPE_SECRET_KEY,
        webhook_secret=config.STRIPE_WEBHOOK_SECRET,
        tolerance=config.STRIPE_WEBHOOK_TOLERANCE,
    )
