import pytest
import stripe

from travel_api.currency import DEFAULT_RATES
from travel_api.payments import (
    InvalidRequest,
    NotFound,
    Package,
    PackageCatalog,
    PaymentProviderError,
    ServiceNotConfigured,
    StripeGateway,
    create_checkout_session,
    get_session_status,
    load_catalog,
    parse_checkout_request,
    resolve_amount,
)

CATALOG = PackageCatalog([Package(id="7", name="Bali Escape", price_base=1499.0)])


class _RecordingGateway(StripeGateway):
    def __init__(self, api_key="sk_test_fake"):
        super().__init__(api_key=api_key)
        self.calls = []

    def create_session(self, **params):
        self.require_configured()
        self.calls.append(params)
        return {"id": "cs_test_1", "url": "https://checkout.stripe.com/c/pay/cs_test_1"}


def _create(body, gateway, catalog=PackageCatalog(), strict=False):
    return create_checkout_session(
        body,
        gateway=gateway,
        catalog=catalog,
        table=DEFAULT_RATES,
        frontend_url="http://localhost:5500",
        strict_pricing=strict,
    )


def test_create_session_returns_id_and_url():
    gw = _RecordingGateway()
    res = _create({"packageId": "X1", "packageName": "City Break", "amount": 19.995}, gw)
    assert res == {"sessionId": "cs_test_1", "url": "https://checkout.stripe.com/c/pay/cs_test_1"}
    assert gw.calls[0]["line_items"][0]["price_data"]["unit_amount"] == 2000
    assert gw.calls[0]["success_url"] == "http://localhost:5500?payment=success&session_id={CHECKOUT_SESSION_ID}"


def test_create_session_not_configured_fails_before_validation():
    gw = _RecordingGateway(api_key="")
    with pytest.raises(ServiceNotConfigured) as exc:
        _create({}, gw)
    assert "STRIPE_SECRET_KEY" in exc.value.message
    assert gw.calls == []


def test_create_session_invalid_body_never_reaches_provider():
    gw = _RecordingGateway()
    with pytest.raises(InvalidRequest):
        _create({"packageId": "", "packageName": "City Break", "amount": 10}, gw)
    assert gw.calls == []


def test_catalog_price_overrides_client_amount():
    gw = _RecordingGateway()
    _create({"packageId": "7", "packageName": "Bali Escape", "amount": 1.0}, gw, catalog=CATALOG)
    assert gw.calls[0]["line_items"][0]["price_data"]["unit_amount"] == 149900


def test_catalog_price_converted_to_requested_currency():
    req = parse_checkout_request(
        {"packageId": "7", "packageName": "Bali Escape", "amount": 1499, "currency": "EUR"}, DEFAULT_RATES
    )
    resolved = resolve_amount(req, CATALOG, DEFAULT_RATES)
    assert resolved.amount == round(1499 / 1.0 * 0.92, 2)
    assert resolved.currency == "EUR"


def test_unknown_package_strict_pricing_rejected():
    gw = _RecordingGateway()
    with pytest.raises(InvalidRequest):
        _create({"packageId": "99", "packageName": "Ghost", "amount": 1}, gw, catalog=CATALOG, strict=True)
    assert gw.calls == []


def test_unknown_package_lenient_uses_client_amount():
    req = parse_checkout_request({"packageId": "99", "packageName": "Ghost", "amount": 12.5}, DEFAULT_RATES)
    assert resolve_amount(req, CATALOG, DEFAULT_RATES) is req


def test_load_catalog_skips_invalid_rows(tmp_path):
    path = tmp_path / "packages.json"
    path.write_text('[{"id": "1", "name": "Paris", "price": 1299}, {"id": "", "name": "x", "price": 1}, {"id": "2", "name": "Free", "price": 0}]')
    catalog = load_catalog(path)
    assert len(catalog) == 1
    assert "1" in catalog
    assert catalog.get(1).price_base == 1299.0


def test_load_catalog_missing_file_is_empty(tmp_path):
    assert len(load_catalog(tmp_path / "absent.json")) == 0


def test_bundled_catalog_contains_bali_escape():
    from travel_api.config import DATA_DIR

    catalog = load_catalog(DATA_DIR / "packages.json")
    assert catalog.get("7").name == "Bali Escape"
    assert catalog.quote("7", "USD", DEFAULT_RATES) == 1499.0


def test_gateway_create_session_passes_api_key(monkeypatch):
    captured = {}

    def fake_create(**kwargs):
        captured.update(kwargs)
        return {"id": "cs_1", "url": "https://checkout.stripe.com/c/pay/cs_1"}

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
    gw = StripeGateway(api_key="sk_test_123")
    session = gw.create_session(mode="payment", line_items=[])
    assert session["id"] == "cs_1"
    assert captured["api_key"] == "sk_test_123"
    assert captured["mode"] == "payment"


def test_gateway_provider_failure_keeps_message(monkeypatch):
    def boom(**kwargs):
        raise stripe.APIConnectionError("Network unreachable")

    monkeypatch.setattr(stripe.checkout.Session, "create", boom)
    with pytest.raises(PaymentProviderError) as exc:
        StripeGateway(api_key="sk_test_123").create_session(mode="payment")
    assert exc.value.status_code == 500
    assert "Network unreachable" in exc.value.detail
    assert exc.value.to_dict()["error"] == "payment_provider_error"


def test_gateway_retrieve_missing_session_is_not_found(monkeypatch):
    def missing(session_id, **kwargs):
        raise stripe.InvalidRequestError(
            f"No such checkout.session: '{session_id}'", "id", code="resource_missing", http_status=404
        )

    monkeypatch.setattr(stripe.checkout.Session, "retrieve", missing)
    with pytest.raises(NotFound):
        StripeGateway(api_key="sk_test_123").retrieve_session("cs_missing")


def test_gateway_not_configured_makes_no_call(monkeypatch):
    def forbidden(**kwargs):
        raise AssertionError("network call attempted")

    monkeypatch.setattr(stripe.checkout.Session, "create", forbidden)
    with pytest.raises(ServiceNotConfigured):
        StripeGateway(api_key="").create_session(mode="payment")


class _SessionGateway(StripeGateway):
    def __init__(self, session):
        super().__init__(api_key="sk_test_fake")
        self.session = session

    def retrieve_session(self, session_id):
        if self.session is None:
            raise NotFound()
        return self.session


def test_session_status_maps_fields():
    gw = _SessionGateway({
        "id": "cs_1",
        "payment_status": "paid",
        "amount_total": 137908,
        "customer_details": {"email": "ava@example.com"},
        "metadata": {"packageId": "7", "packageName": "Bali Escape"},
    })
    assert get_session_status("cs_1", gateway=gw) == {
        "status": "paid",
        "customerEmail": "ava@example.com",
        "amountTotal": 1379.08,
        "metadata": {"packageId": "7", "packageName": "Bali Escape"},
    }


def test_session_status_optional_fields():
    gw = _SessionGateway({"id": "cs_1", "payment_status": "unpaid", "amount_total": None, "customer_details": None})
    res = get_session_status("cs_1", gateway=gw)
    assert res["customerEmail"] is None
    assert res["amountTotal"] is None
    assert res["metadata"] == {}


def test_session_status_unknown_session():
    with pytest.raises(NotFound) as exc:
        get_session_status("cs_missing", gateway=_SessionGateway(None))
    assert exc.value.status_code == 404
