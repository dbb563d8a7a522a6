import logging
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

import stripe

from issuepay.config import get_settings
from issuepay.errors import UpstreamError

logger = logging.getLogger(__name__)

stripe.api_key = get_settings().STRIPE_SECRET_KEY


def to_minor_units(cost) -> int:
    return int((Decimal(str(cost)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _field(obj, name):
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


@dataclass
class CheckoutOutcome:
    session_id: str
    payment_status: Optional[str]
    transaction_id: Optional[str]
    amount_total: Optional[int]
    customer_email: Optional[str]
    issue_id: Optional[str]

    @classmethod
    def from_session(cls, session):
        details = _field(session, "customer_details")
        metadata = _field(session, "metadata")
        return cls(
            session_id=_field(session, "id"),
            payment_status=_field(session, "payment_status"),
            transaction_id=_field(session, "payment_intent"),
            amount_total=_field(session, "amount_total"),
            customer_email=_field(details, "email") or _field(session, "customer_email"),
            issue_id=_field(metadata, "issueId"),
        )


class StripeCheckoutProvider:
    """Hosted checkout sessions backed by Stripe Checkout."""

    def __init__(self, settings=None):
        self.settings = settings or get_settings()

    def create_checkout_session(self, cost, issue_title: str, email: str, issue_id: str,
                                success_template: Optional[str] = None) -> str:
        settings = self.settings
        amount = to_minor_units(cost)
        success_template = success_template or settings.SUCCESS_URL_TEMPLATE
        try:
            session = stripe.checkout.Session.create(
                line_items=[
                    {
                        "price_data": {
                            "currency": settings.CHECKOUT_CURRENCY,
                            "unit_amount": amount,
                            "product_data": {"name": issue_title},
                        },
                        "quantity": 1,
                    }
                ],
                customer_email=email,
                mode="payment",
                metadata={"issueId": issue_id},
                success_url=settings.redirect_url(success_template),
                cancel_url=settings.redirect_url(settings.CANCEL_URL_TEMPLATE),
            )
        except stripe.StripeError as e:
            logger.error("Checkout session creation failed for issue %s: %s", issue_id, e)
            raise UpstreamError("payment provider rejected the checkout session")

        logger.info("Created checkout session %s for issue %s (%s minor units)",
                    _field(session, "id"), issue_id, amount)
        return _field(session, "url")

    def retrieve_session(self, session_id: str) -> CheckoutOutcome:
        try:
            session = stripe.checkout.Session.retrieve(session_id)
        except stripe.StripeError as e:
            logger.error("Checkout session %s lookup failed: %s", session_id, e)
            raise UpstreamError("payment provider could not return the checkout session")
        return CheckoutOutcome.from_session(session)


def get_checkout_provider() -> StripeCheckoutProvider:
    return StripeCheckoutProvider()
