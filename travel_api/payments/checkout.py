"""
Logique checkout pure (pas de Stripe, pas de réseau).
Validation de la requête, line item, métadonnées et URLs de redirection.
"""
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from travel_api.currency import RateTable, to_minor_units
from .errors import InvalidRequest

MISSING_FIELDS_MESSAGE = "Missing required fields: packageId, packageName, amount"

# Placeholder remplacé par Stripe dans l'URL de succès
SESSION_ID_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"

def _clean_text(value: Any) -> str:
    """Valeur falsy => "", sinon chaîne sans espaces autour ("   " => "")."""
    return str(value).strip() if value else ""

# module travel_api.payments.checkout
@dataclass(frozen=True)
class CheckoutRequest:
    package_id: str
    package_name: str
    amount: float
    quantity: int = 1
    currency: str = "USD"


def parse_checkout_request(body: Dict[str, Any], table: RateTable) -> CheckoutRequest:
    """
    Valide le JSON {packageId, packageName, amount, quantity?, currency?}.
    - packageId, packageName, amount absents ou "falsy" (""/0/None) => InvalidRequest
    - amount non numérique ou négatif, quantity < 1, devise inconnue => InvalidRequest
    - currency par défaut: devise de base de la table
    """
    if not isinstance(body, dict):
        raise InvalidRequest("Request body must be a JSON object")

    package_id = _clean_text(body.get("packageId"))
    package_name = _clean_text(body.get("packageName"))
    amount = body.get("amount")
    if not package_id or not package_name or not amount:
        raise InvalidRequest(MISSING_FIELDS_MESSAGE)

    if isinstance(amount, bool):
        raise InvalidRequest("amount must be a positive number")
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        raise InvalidRequest("amount must be a positive number")
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidRequest("amount must be a positive number")

    quantity = body.get("quantity")
    if quantity is None:
        quantity = 1
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float, str)):
        raise InvalidRequest("quantity must be a positive integer")
    try:
        quantity_f = float(quantity)
    except ValueError:
        raise InvalidRequest("quantity must be a positive integer")
    if not math.isfinite(quantity_f) or quantity_f < 1 or quantity_f != int(quantity_f):
        raise InvalidRequest("quantity must be a positive integer")

    currency = str(body.get("currency") or table.base).strip().upper()
    if not table.supports(currency):
        raise InvalidRequest(f"Unsupported currency: {currency}")

    return CheckoutRequest(
        package_id=package_id,
        package_name=package_name,
        amount=amount,
        quantity=int(quantity_f),
        currency=currency,
    )


def build_line_item(request: CheckoutRequest) -> Dict[str, Any]:
    """
    Construit l'unique line item Stripe (price_data en unités mineures).
    """
    return {
        "price_data": {
            "currency": request.currency.lower(),
            "product_data": {
                "name": request.package_name,
                "description": f"Travel package booking - Package ID: {request.package_id}",
            },
            "unit_amount": to_minor_units(request.amount),
        },
        "quantity": request.quantity,
    }


def build_metadata(request: CheckoutRequest) -> Dict[str, str]:
    """Contexte de réservation récupérable par le webhook et la lecture de session."""
    return {
        "packageId": str(request.package_id),
        "packageName": request.package_name,
    }


def build_redirect_urls(frontend_url: str) -> Tuple[str, str]:
    """
    URLs success/cancel construites sur l'origine du front.
    - success: ?payment=success&session_id={CHECKOUT_SESSION_ID}
    - cancel:  ?payment=cancelled
    """
    origin = (frontend_url or "").strip()
    sep = "&" if "?" in origin else "?"
    success_url = f"{origin}{sep}payment=success&session_id={SESSION_ID_PLACEHOLDER}"
    cancel_url = f"{origin}{sep}payment=cancelled"
    return success_url, cancel_url


def build_session_params(request: CheckoutRequest, frontend_url: str) -> Dict[str, Any]:
    """Paramètres complets de stripe.checkout.Session.create (mode paiement, usage unique)."""
    success_url, cancel_url = build_redirect_urls(frontend_url)
    line_items: List[Dict[str, Any]] = [build_line_item(request)]
    return {
        "payment_method_types": ["card"],
        "line_items": line_items,
        "mode": "payment",
        "success_url": success_url,
        "cancel_url": cancel_url,
        "metadata": build_metadata(request),
    }
