"""
Dispatch des événements Stripe vérifiés.
- checkout.session.completed: confirmation de réservation (collaborateur externe)
- checkout.session.expired: observabilité uniquement
- autre type: ignoré, loggé comme non géré
"""
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

from .metadata import event_object, extract_booking_from_event

logger = logging.getLogger(__name__)

SESSION_COMPLETED = "checkout.session.completed"
SESSION_EXPIRED = "checkout.session.expired"

Handler = Callable[[Dict[str, Any]], Optional[Awaitable[None]]]


class BookingConfirmationSink(Protocol):
    """
    Collaborateur externe (ledger de réservations, emails...).
    Doit dédupliquer sur session_id: un même paiement peut être redélivré.
    """

    def confirm(self, booking: Dict[str, Any]) -> None: ...


class LoggingConfirmationSink:
    """Implémentation par défaut: trace la réservation confirmée, sans persistance."""

    def confirm(self, booking: Dict[str, Any]) -> None:
        logger.info(
            "payments.booking confirmed session=%s package=%s (%s) email=%s",
            booking.get("session_id"),
            booking.get("package_id"),
            booking.get("package_name"),
            booking.get("customer_email"),
        )

# module travel_api.payments.webhooks
class WebhookDispatcher:
    """
    Registre {event_type: handler}.
    Les handlers peuvent être sync ou async; ils reçoivent l'event complet (dict).
    """

    def __init__(self, sink: Optional[BookingConfirmationSink] = None):
        self.sink = sink or LoggingConfirmationSink()
        self._handlers: Dict[str, Handler] = {
            SESSION_COMPLETED: self._on_completed,
            SESSION_EXPIRED: self._on_expired,
        }

    def register(self, event_type: str, handler: Handler) -> None:
        self._handlers[event_type] = handler

    def handles(self, event_type: Optional[str]) -> bool:
        return event_type in self._handlers

    async def dispatch(self, event: Dict[str, Any]) -> bool:
        """
        Exécute le handler du type d'event.
        Retour: True si un handler a été exécuté, False si type non géré.
        """
        event_type = (event or {}).get("type")
        handler = self._handlers.get(event_type)
        if handler is None:
            logger.info("payments.webhook unhandled event type=%s id=%s", event_type, event.get("id"))
            return False
        result = handler(event)
        if inspect.isawaitable(result):
            await result
        return True

    def _on_completed(self, event: Dict[str, Any]) -> None:
        booking = extract_booking_from_event(event)
        logger.info("payments.webhook payment successful session=%s", booking.get("session_id"))
        self.sink.confirm(booking)

    def _on_expired(self, event: Dict[str, Any]) -> None:
        session = event_object(event)
        logger.info("payments.webhook checkout session expired session=%s", session.get("id"))


def get_webhook_dispatcher() -> WebhookDispatcher:
    """Dépendance FastAPI (surchargée dans les tests)."""
    return WebhookDispatcher()
