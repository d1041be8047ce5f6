import hashlib
import hmac
import json
import os
import time
from typing import Any, Dict, Generator, List

import pytest
from fastapi.testclient import TestClient

# Pas de Redis en tests: rate limiting désactivé avant l'import de l'app
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from travel_api.app import app as fastapi_app
from travel_api.payments.errors import NotFound
from travel_api.payments.idempotency import MemoryProcessedEventStore
from travel_api.payments.stripe_client import StripeGateway, get_payment_gateway
from travel_api.payments.webhooks import WebhookDispatcher, get_webhook_dispatcher

WEBHOOK_SECRET = "whsec_test_secret"


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)
        elif "/functional/" in nodeid:
            item.add_marker(pytest.mark.functional)


class FakeStripeGateway(StripeGateway):
    """
    Stripe simulé: sessions en mémoire, vérification de signature réelle (verify_event hérité).
    """

    def __init__(self, api_key: str = "sk_test_fake", webhook_secret: str = WEBHOOK_SECRET):
        super().__init__(api_key=api_key, webhook_secret=webhook_secret, tolerance=300)
        self.created: List[Dict[str, Any]] = []
        self.sessions: Dict[str, Dict[str, Any]] = {}

    def create_session(self, **params: Any) -> Dict[str, Any]:
        self.require_configured()
        self.created.append(params)
        session_id = f"cs_test_{len(self.created):04d}"
        url = f"https://checkout.stripe.com/c/pay/{session_id}"
        item = params["line_items"][0]
        self.sessions[session_id] = {
            "id": session_id,
            "url": url,
            "status": "open",
            "payment_status": "unpaid",
            "amount_total": item["price_data"]["unit_amount"] * item["quantity"],
            "currency": item["price_data"]["currency"],
            "metadata": dict(params.get("metadata") or {}),
            "customer_details": None,
        }
        return {"id": session_id, "url": url}

    def retrieve_session(self, session_id: str) -> Dict[str, Any]:
        self.require_configured()
        if session_id not in self.sessions:
            raise NotFound(f"Checkout session {session_id} not found")
        return self.sessions[session_id]

    def complete(self, session_id: str, email: str = "traveller@example.com") -> Dict[str, Any]:
        session = self.sessions[session_id]
        session.update({"status": "complete", "payment_status": "paid", "customer_details": {"email": email}})
        return session


class RecordingSink:
    def __init__(self):
        self.bookings: List[Dict[str, Any]] = []

    def confirm(self, booking: Dict[str, Any]) -> None:
        self.bookings.append(booking)


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """En-tête Stripe-Signature (schéma v1) pour un corps brut."""
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.".encode("utf-8") + payload
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={signature}"


def make_event(event_type: str, session: Dict[str, Any], event_id: str = "evt_test_1") -> bytes:
    return json.dumps({
        "id": event_id,
        "object": "event",
        "type": event_type,
        "data": {"object": session},
    }).encode("utf-8")


@pytest.fixture(scope="session")
def app():
    return fastapi_app


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def fake_gateway() -> FakeStripeGateway:
    return FakeStripeGateway()


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


# Stripe simulé + dispatcher observable pour tous les tests HTTP
@pytest.fixture(autouse=True)
def _override_payment_dependencies(app, fake_gateway, recording_sink):
    app.dependency_overrides[get_payment_gateway] = lambda: fake_gateway
    app.dependency_overrides[get_webhook_dispatcher] = lambda: WebhookDispatcher(sink=recording_sink)
    app.state.event_store = MemoryProcessedEventStore()
    try:
        yield
    finally:
        app.dependency_overrides.clear()
        app.state.event_store = None


@pytest.fixture
def stripe_signature():
    return sign_payload


@pytest.fixture
def webhook_event():
    return make_event
