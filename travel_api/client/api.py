"""
Transport HTTP du front vers l'API payment (httpx).
"""
import logging
from typing import Any, Dict, Optional, Protocol

import httpx

logger = logging.getLogger(__name__)


class CheckoutFailed(Exception):
    """Échec de création de session; message affichable à l'utilisateur."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PaymentApi(Protocol):
    def create_checkout_session(self, payload: Dict[str, Any]) -> Dict[str, Any]: ...

# module travel_api.client.api
class HttpPaymentApi:
    """
    Client de l'endpoint POST {base_path}/payment/create-checkout-session.
    - client: httpx.Client configuré avec base_url (TestClient accepté en tests)
    """

    def __init__(self, client: httpx.Client, base_path: str = "/api"):
        self.client = client
        self.base_path = base_path.rstrip("/")

    def create_checkout_session(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_path}/payment/create-checkout-session"
        try:
            res = self.client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.warning("client.checkout network error: %s", e)
            raise CheckoutFailed("Unable to reach the booking service. Please try again.")

        try:
            data = res.json()
        except ValueError:
            data = {}
        # Corps JSON non objet (ex: "Bad Gateway" renvoyé par un proxy)
        if not isinstance(data, dict):
            data = {}
        if res.status_code >= 400:
            message = data.get("message") or data.get("error") or data.get("detail") or f"HTTP {res.status_code}"
            raise CheckoutFailed(str(message), status_code=res.status_code)
        if not data.get("url"):
            raise CheckoutFailed("Checkout session did not return a redirect URL", status_code=res.status_code)
        return data
