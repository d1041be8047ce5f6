"""
Module 'payments' (feature-first): point d'entrée public.
Réunit logique checkout, catalogue, client Stripe, webhooks, idempotence et services.
"""

from .errors import (
    PaymentError,
    InvalidRequest,
    ServiceNotConfigured,
    PaymentProviderError,
    SignatureInvalid,
    NotFound,
)
from .checkout import (
    CheckoutRequest,
    parse_checkout_request,
    build_line_item,
    build_metadata,
    build_redirect_urls,
    build_session_params,
)
from .catalog import Package, PackageCatalog, load_catalog, get_package_catalog
from .metadata import event_object, extract_booking, extract_booking_from_event
from .stripe_client import StripeGateway, get_payment_gateway
from .idempotency import MemoryProcessedEventStore, RedisProcessedEventStore, build_event_store
from .webhooks import WebhookDispatcher, LoggingConfirmationSink, get_webhook_dispatcher
from .service import resolve_amount, create_checkout_session, handle_webhook, get_session_status

__all__ = [
    # errors
    "PaymentError",
    "InvalidRequest",
    "ServiceNotConfigured",
    "PaymentProviderError",
    "SignatureInvalid",
    "NotFound",
    # checkout
    "CheckoutRequest",
    "parse_checkout_request",
    "build_line_item",
    "build_metadata",
    "build_redirect_urls",
    "build_session_params",
    # catalog
    "Package",
    "PackageCatalog",
    "load_catalog",
    "get_package_catalog",
    # metadata
    "event_object",
    "extract_booking",
    "extract_booking_from_event",
    # stripe
    "StripeGateway",
    "get_payment_gateway",
    # idempotency
    "MemoryProcessedEventStore",
    "RedisProcessedEventStore",
    "build_event_store",
    # webhooks
    "WebhookDispatcher",
    "LoggingConfirmationSink",
    "get_webhook_dispatcher",
    # services
    "resolve_amount",
    "create_checkout_session",
    "handle_webhook",
    "get_session_status",
]
