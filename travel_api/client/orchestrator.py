"""
Orchestrateur de paiement côté client (une instance par chargement de page).

États:
    IDLE -> AWAITING_REDIRECT            (clic "Book Now", redirection vers Stripe)
    IDLE -> SHOWING_SUCCESS -> IDLE      (retour ?payment=success&session_id=...)
    IDLE -> SHOWING_CANCELLED -> IDLE    (retour ?payment=cancelled)

Les API navigateur (location, history, DOM) sont des collaborateurs injectés.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from travel_api.currency import DEFAULT_RATES, RateTable, convert, format_amount, round_money
from .api import CheckoutFailed, PaymentApi
from .storage import CurrencyPreference

logger = logging.getLogger(__name__)

PAYMENT_PARAMS = ("payment", "session_id")
GENERIC_CHECKOUT_ERROR = "Something went wrong while starting your booking. Please try again."


class State(enum.Enum):
    IDLE = "idle"
    AWAITING_REDIRECT = "awaiting_redirect"
    SHOWING_SUCCESS = "showing_success"
    SHOWING_CANCELLED = "showing_cancelled"


class Browser(Protocol):
    @property
    def current_url(self) -> str: ...

    def navigate(self, url: str) -> None: ...

    def replace_url(self, url: str) -> None: ...


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def cancelled(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class Control(Protocol):
    def disable(self) -> None: ...

    def enable(self) -> None: ...


@dataclass(frozen=True)
class PackageOffer:
    """Forfait tel qu'affiché sur la page (prix en devise de base)."""
    id: str
    name: str
    price_base: float


def strip_payment_params(url: str) -> str:
    """Retire payment et session_id de l'URL, conserve les autres paramètres et le fragment."""
    parts = urlsplit(url)
    kept = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in PAYMENT_PARAMS]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(kept), parts.fragment))

# module travel_api.client.orchestrator
class PaymentOrchestrator:
    def __init__(
        self,
        api: PaymentApi,
        browser: Browser,
        notifier: Notifier,
        preference: CurrencyPreference,
        table: RateTable = DEFAULT_RATES,
    ):
        self.api = api
        self.browser = browser
        self.notifier = notifier
        self.preference = preference
        self.table = table
        self.state = State.IDLE
        self.session_id: Optional[str] = None

    def quote(self, package: PackageOffer) -> float:
        """Prix du forfait dans la devise préférée, arrondi à 2 décimales."""
        currency = self.preference.get()
        return round_money(convert(package.price_base, self.table.base, currency, self.table))

    def display_price(self, package: PackageOffer) -> str:
        return format_amount(self.quote(package), self.preference.get())

    def book(self, package: PackageOffer, control: Optional[Control] = None, quantity: int = 1) -> bool:
        """
        Action "Book Now".
        - Succès: redirection pleine page vers l'URL Stripe, état AWAITING_REDIRECT (terminal)
        - Échec: contrôle réactivé, message affiché, retour à IDLE (pas de retry automatique)
        """
        if self.state is State.AWAITING_REDIRECT:
            return False
        if control is not None:
            control.disable()

        currency = self.preference.get()
        payload = {
            "packageId": package.id,
            "packageName": package.name,
            "amount": self.quote(package),
            "quantity": quantity,
            "currency": currency,
        }
        try:
            result = self.api.create_checkout_session(payload)
            url = result["url"]
        except CheckoutFailed as e:
            logger.info("client.checkout failed package=%s: %s", package.id, e.message)
            return self._fail(control, e.message)
        except Exception:
            logger.exception("client.checkout unexpected error package=%s", package.id)
            return self._fail(control, GENERIC_CHECKOUT_ERROR)

        self.session_id = result.get("sessionId")
        self.state = State.AWAITING_REDIRECT
        self.browser.navigate(url)
        return True

    def _fail(self, control: Optional[Control], message: str) -> bool:
        # Le bouton redevient cliquable quelle que soit l'erreur
        if control is not None:
            control.enable()
        self.notifier.error(message)
        self.state = State.IDLE
        return False

    def handle_return(self) -> State:
        """
        Au chargement de page: lit ?payment=... laissé par Stripe.
        - success + session_id => SHOWING_SUCCESS
        - cancelled => SHOWING_CANCELLED
        Dans les deux cas l'URL visible est réécrite sans ces paramètres (pas de rechargement).
        """
        url = self.browser.current_url
        params = dict(parse_qsl(urlsplit(url).query, keep_blank_values=True))
        payment = params.get("payment")
        session_id = params.get("session_id")

        if payment == "success" and session_id:
            self.session_id = session_id
            self.state = State.SHOWING_SUCCESS
            self.notifier.success("Payment successful! Your booking is confirmed. A confirmation email is on its way.")
            self.browser.replace_url(strip_payment_params(url))
        elif payment == "cancelled":
            self.state = State.SHOWING_CANCELLED
            self.notifier.cancelled("Payment cancelled. You can book again whenever you are ready.")
            self.browser.replace_url(strip_payment_params(url))
        return self.state

    def acknowledge(self) -> State:
        """L'utilisateur ferme la notification."""
        if self.state in (State.SHOWING_SUCCESS, State.SHOWING_CANCELLED):
            self.state = State.IDLE
        return self.state
