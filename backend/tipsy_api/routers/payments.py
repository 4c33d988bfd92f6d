"""
Payment link endpoints.

TIPSY does not move money; these endpoints hand the front end a checkout
or UPI deep link built by the configured ``PaymentLinkProvider``.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from tipsy_shared.utils.account_schemas import (
    STRIPE_ERROR_CODES,
    UPI_ERROR_CODES,
    StripeCheckoutRequest,
    StripeCheckoutSession,
    UpiIntent,
    UpiIntentRequest,
)
from tipsy_shared.utils.validators import parse_body

from tipsy_api.services.domain import PaymentLinkProvider, get_payment_provider


router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/stripe/checkout", response_model=StripeCheckoutSession)
def create_checkout(
    body: Any = Body(default=None),
    provider: PaymentLinkProvider = Depends(get_payment_provider),
) -> StripeCheckoutSession:
    data = parse_body(StripeCheckoutRequest, body, STRIPE_ERROR_CODES)
    return provider.create_checkout(data)


@router.post("/upi-intent", response_model=UpiIntent)
def create_upi_intent(
    body: Any = Body(default=None),
    provider: PaymentLinkProvider = Depends(get_payment_provider),
) -> UpiIntent:
    data = parse_body(UpiIntentRequest, body, UPI_ERROR_CODES)
    return provider.create_upi_intent(data)
