"""
HTTP client for the payment provider (Stripe PaymentIntents API)
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

import httpx
import structlog

from fundflow.core.config import Settings
from fundflow.core.exceptions import UpstreamError

logger = structlog.get_logger(__name__)


def to_minor_units(amount: float) -> int:
    """Convert a currency amount to the smallest unit (cents), rounding half up"""
    cents = (Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(cents)


class StripePaymentClient:
    """Creates charge intents; the returned client secret is handed to the browser"""

    def __init__(
        self,
        secret_key: str,
        api_base: str = "https://api.stripe.com",
        currency: str = "usd",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = secret_key
        self.base_url = api_base.rstrip("/")
        self.currency = currency
        self.timeout = httpx.Timeout(timeout, connect=5.0)
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "StripePaymentClient":
        return cls(
            secret_key=settings.stripe_secret_key,
            api_base=settings.stripe_api_base,
            currency=settings.payment_currency,
            timeout=settings.payment_timeout,
        )

    async def create_payment_intent(self, amount: float, campaign_id: str) -> str:
        """
        Create a PaymentIntent and return its client secret

        Args:
            amount: Amount in currency units
            campaign_id: Stored as intent metadata

        Returns:
            The intent's client secret
        """
        if not self.secret_key:
            logger.error("Payment provider secret key is not configured")
            raise UpstreamError("Payment provider is not configured")

        form = {
            "amount": str(to_minor_units(amount)),
            "currency": self.currency,
            "metadata[campaignId]": campaign_id,
            "automatic_payment_methods[enabled]": "true",
            "automatic_payment_methods[allow_redirects]": "never",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/v1/payment_intents",
                    data=form,
                    auth=(self.secret_key, ""),
                )
        except httpx.TimeoutException:
            logger.error("Timeout while creating payment intent", campaign_id=campaign_id)
            raise UpstreamError("Payment provider timeout")
        except httpx.RequestError as e:
            logger.error("Connection error to payment provider", campaign_id=campaign_id, error=str(e))
            raise UpstreamError("Payment provider unavailable")

        if response.status_code != 200:
            try:
                detail = response.json().get("error", {}).get("message", "Payment provider error")
            except ValueError:
                detail = "Payment provider error"
            logger.error(
                "Failed to create payment intent",
                campaign_id=campaign_id,
                status_code=response.status_code,
                error=detail,
            )
            raise UpstreamError(detail)

        try:
            data = response.json()
            client_secret = data["client_secret"]
        except (ValueError, KeyError, TypeError):
            logger.error("Malformed payment provider response", campaign_id=campaign_id)
            raise UpstreamError("Malformed payment provider response")

        logger.info("Payment intent created", payment_intent_id=data.get("id"), campaign_id=campaign_id)
        return client_secret
