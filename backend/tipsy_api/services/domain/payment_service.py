"""
Payment link providers.

TIPSY records tips as payment intents; moving money is left to an external
provider. ``StubPaymentLinkProvider`` produces realistic looking links so the
front end can be exercised without credentials.
"""

from __future__ import annotations

import json
import secrets
from decimal import Decimal
from typing import Protocol
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from tipsy_shared.config.logging import get_logger
from tipsy_shared.utils.account_schemas import (
    StripeCheckoutRequest,
    StripeCheckoutSession,
    UpiIntent,
    UpiIntentRequest,
)

logger = get_logger(__name__)

DEFAULT_SUCCESS_URL = "https://example.com/success"
DEFAULT_CANCEL_URL = "https://example.com/cancel"
DEFAULT_PAYEE_NAME = "TIPSY"
DEFAULT_UPI_NOTE = "Tip via TIPSY"


class PaymentLinkProvider(Protocol):
    """What a real card or UPI integration has to provide."""

    def create_checkout(self, request: StripeCheckoutRequest) -> StripeCheckoutSession:
        ...

    def create_upi_intent(self, request: UpiIntentRequest) -> UpiIntent:
        ...


def _with_query(url: str, params: dict[str, str]) -> str:
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True) + list(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))


def format_inr(amount: Decimal) -> str:
    return str(amount.quantize(Decimal("0.01")))


class StubPaymentLinkProvider:
    """Builds links locally; no network calls."""

    def create_checkout(self, request: StripeCheckoutRequest) -> StripeCheckoutSession:
        session_id = f"cs_test_{secrets.token_hex(12)}"
        params = {
            "session_id": session_id,
            "amount_cents": str(request.amount_cents),
            "currency": request.currency.upper(),
        }
        if request.metadata:
            params["meta"] = json.dumps(request.metadata, sort_keys=True)

        logger.info(
            "Stub checkout session created",
            session_id=session_id,
            amount_cents=request.amount_cents,
            currency=params["currency"],
        )
        return StripeCheckoutSession(
            checkout_url=_with_query(request.success_url or DEFAULT_SUCCESS_URL, params),
            session_id=session_id,
            cancel_url=request.cancel_url or DEFAULT_CANCEL_URL,
        )

    def create_upi_intent(self, request: UpiIntentRequest) -> UpiIntent:
        params = {
            "pa": request.upi_handle,
            "pn": request.payee_name or DEFAULT_PAYEE_NAME,
            "am": format_inr(request.amount_inr),
            "cu": "INR",
            "tn": request.note or DEFAULT_UPI_NOTE,
        }
        return UpiIntent(url="upi://pay?" + urlencode(params, quote_via=quote, safe="@"))


_provider: PaymentLinkProvider = StubPaymentLinkProvider()


def get_payment_provider() -> PaymentLinkProvider:
    """FastAPI dependency; tests and deployments may override it."""
    return _provider
