"""
Module 'client': logique de paiement du site vitrine, navigateur injecté.
"""

from .storage import KeyValueStorage, MemoryStorage, CurrencyPreference
from .api import CheckoutFailed, PaymentApi, HttpPaymentApi
from .orchestrator import PackageOffer, PaymentOrchestrator, State, strip_payment_params

__all__ = [
    "KeyValueStorage",
    "MemoryStorage",
    "CurrencyPreference",
    "CheckoutFailed",
    "PaymentApi",
    "HttpPaymentApi",
    "PackageOffer",
    "PaymentOrchestrator",
    "State",
    "strip_payment_params",
]
