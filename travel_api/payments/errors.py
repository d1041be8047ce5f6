"""
Taxonomie d'erreurs de la feature 'payments'.
Chaque erreur porte son statut HTTP, un code machine et un message lisible;
le mapping vers la réponse JSON est fait par le handler d'exceptions de l'app.
"""
from typing import Any, Dict, Optional

# module travel_api.payments.errors
class PaymentError(Exception):
    status_code = 500
    code = "payment_error"
    default_message = "Payment error"

    def __init__(self, message: Optional[str] = None, *, detail: Optional[str] = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.detail:
            body["detail"] = self.detail
        return body


class InvalidRequest(PaymentError):
    status_code = 400
    code = "invalid_request"
    default_message = "Invalid request"


class ServiceNotConfigured(PaymentError):
    """Erreur de déploiement (clé manquante), pas une erreur utilisateur."""
    status_code = 500
    code = "service_not_configured"
    default_message = "Payment service not configured"


class PaymentProviderError(PaymentError):
    """Échec côté Stripe; detail conserve le message du fournisseur pour les opérateurs."""
    status_code = 500
    code = "payment_provider_error"
    default_message = "Payment provider request failed"


class SignatureInvalid(PaymentError):
    # 4xx: Stripe ne doit pas réessayer un échec non récupérable
    status_code = 400
    code = "signature_invalid"
    default_message = "Webhook signature verification failed"


class NotFound(PaymentError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"
