from urllib.parse import urlparse

from travel_api import config
from travel_api.client import (
    CurrencyPreference,
    HttpPaymentApi,
    MemoryStorage,
    PackageOffer,
    PaymentOrchestrator,
    State,
)
from travel_api.currency import DEFAULT_RATES

BALI = PackageOffer(id="7", name="Bali Escape", price_base=1499.0)


class PageBrowser:
    def __init__(self, url: str):
        self._url = url
        self.navigated = []

    @property
    def current_url(self) -> str:
        return self._url

    def navigate(self, url: str) -> None:
        self.navigated.append(url)

    def replace_url(self, url: str) -> None:
        self._url = url


class Banner:
    def __init__(self):
        self.messages = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def cancelled(self, message: str) -> None:
        self.messages.append(("cancelled", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))


class BookButton:
    def __init__(self):
        self.disabled = False

    def disable(self) -> None:
        self.disabled = True

    def enable(self) -> None:
        self.disabled = False


def _page(client, url=None, currency="USD"):
    storage = MemoryStorage()
    preference = CurrencyPreference(storage, DEFAULT_RATES)
    preference.set(currency)
    browser = PageBrowser(url or config.FRONTEND_URL)
    banner = Banner()
    orchestrator = PaymentOrchestrator(HttpPaymentApi(client), browser, banner, preference, DEFAULT_RATES)
    return orchestrator, browser, banner


def test_book_pay_and_return_with_confirmation(client, fake_gateway, recording_sink, stripe_signature, webhook_event):
    page, browser, banner = _page(client)
    button = BookButton()

    assert page.display_price(BALI) == "$1,499.00"
    assert page.book(BALI, control=button) is True
    assert page.state is State.AWAITING_REDIRECT
    assert button.disabled is True

    redirect = browser.navigated[0]
    assert urlparse(redirect).hostname == "checkout.stripe.com"
    session_id = page.session_id
    assert fake_gateway.created[0]["line_items"][0]["price_data"]["unit_amount"] == 149900

    # Paiement chez Stripe puis webhook de confirmation
    session = fake_gateway.complete(session_id, email="ana@example.com")
    payload = webhook_event("checkout.session.completed", session, event_id="evt_bali")
    res = client.post("/api/payment/webhook", content=payload, headers={"stripe-signature": stripe_signature(payload)})
    assert res.json() == {"received": True}
    assert recording_sink.bookings == [{
        "session_id": session_id,
        "package_id": "7",
        "package_name": "Bali Escape",
        "customer_email": "ana@example.com",
    }]

    # Retour sur le site (nouveau chargement de page)
    success_url = fake_gateway.created[0]["success_url"].replace("{CHECKOUT_SESSION_ID}", session_id)
    returned, browser2, banner2 = _page(client, url=success_url)
    assert returned.handle_return() is State.SHOWING_SUCCESS
    assert banner2.messages[0][0] == "success"
    assert "payment=" not in browser2.current_url
    assert "session_id=" not in browser2.current_url
    assert returned.acknowledge() is State.IDLE

    status = client.get(f"/api/payment/session/{session_id}").json()
    assert status["status"] == "paid"
    assert status["customerEmail"] == "ana@example.com"
    assert status["amountTotal"] == 1499.0
    assert status["metadata"] == {"packageId": "7", "packageName": "Bali Escape"}


def test_book_in_euros_charges_converted_price(client, fake_gateway):
    page, browser, _ = _page(client, currency="EUR")

    assert page.display_price(BALI) == "€1,379.08"
    assert page.book(BALI) is True

    item = fake_gateway.created[0]["line_items"][0]
    assert item["price_data"]["currency"] == "eur"
    assert item["price_data"]["unit_amount"] == 137908


def test_cancelled_return_shows_notice(client):
    page, browser, banner = _page(client, url=f"{config.FRONTEND_URL}/?payment=cancelled#packages")
    assert page.handle_return() is State.SHOWING_CANCELLED
    assert banner.messages[0][0] == "cancelled"
    assert browser.current_url.endswith("/#packages")


def test_checkout_failure_surfaces_message_and_reenables(app, client):
    from travel_api.payments.stripe_client import StripeGateway, get_payment_gateway

    app.dependency_overrides[get_payment_gateway] = lambda: StripeGateway(api_key="")
    page, browser, banner = _page(client)
    button = BookButton()

    assert page.book(BALI, control=button) is False
    assert page.state is State.IDLE
    assert button.disabled is False
    assert browser.navigated == []
    kind, message = banner.messages[0]
    assert kind == "error"
    assert "STRIPE_SECRET_KEY" in message
