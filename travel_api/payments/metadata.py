"""
Lecture des métadonnées Stripe (packageId, packageName) depuis un event ou une session.
"""
from typing import Any, Dict, Optional

# module travel_api.payments.metadata
def event_object(event: Dict[str, Any]) -> Dict[str, Any]:
    """Retourne event.data.object (dict vide si absent)."""
    data = (event or {}).get("data") if isinstance(event, dict) else None
    obj = (data or {}).get("object") if isinstance(data, dict) else None
    return obj if isinstance(obj, dict) else {}


def extract_booking(session: Dict[str, Any]) -> Dict[str, Optional[str]]:
    """
    Extrait le contexte de réservation d'une session Checkout.
    - Tolérant: champs absents => None
    """
    meta = (session or {}).get("metadata") if isinstance(session, dict) else None
    meta = meta if isinstance(meta, dict) else {}
    details = (session or {}).get("customer_details") or {}
    return {
        "session_id": (session or {}).get("id"),
        "package_id": meta.get("packageId"),
        "package_name": meta.get("packageName"),
        "customer_email": details.get("email") if isinstance(details, dict) else None,
    }


def extract_booking_from_event(event: Dict[str, Any]) -> Dict[str, Optional[str]]:
    """Variante webhook: lit event.data.object puis délègue à extract_booking."""
    return extract_booking(event_object(event))
