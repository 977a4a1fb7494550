import logging
from typing import Any

import httpx

from nextwave_functions.config import Settings

logger = logging.getLogger(__name__)


class CheckoutProviderError(Exception):
    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StripeCheckout:
    """Creates Stripe Checkout sessions over the REST API."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = settings
        self.sessions_url = f"{settings.stripe_api_base}/checkout/sessions"
        self.transport = transport

    async def create_session(self, price_id: str, mode: str, success_url: str, cancel_url: str) -> dict[str, Any]:
        form = {
            "payment_method_types[0]": "card",
            "line_items[0][price]": price_id,
            "line_items[0][quantity]": "1",
            "mode": mode,
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        logger.info("stripe.request price=%s mode=%s", price_id, mode)
        async with httpx.AsyncClient(
            timeout=self.settings.checkout_timeout_seconds,
            transport=self.transport,
        ) as client:
            http_response = await client.post(
                self.sessions_url,
                data=form,
                headers={"Authorization": f"Bearer {self.settings.stripe_secret_key}"},
            )
        if http_response.status_code >= 400:
            message = self._error_message(http_response)
            logger.warning("stripe.error status_code=%d message=%s", http_response.status_code, message)
            raise CheckoutProviderError(message, http_response.status_code)
        try:
            session = http_response.json()
        except ValueError:
            session = None
        if not isinstance(session, dict):
            logger.warning(
                "stripe.malformed status_code=%d body=%s",
                http_response.status_code,
                " ".join(http_response.text.split())[:200],
            )
            raise CheckoutProviderError("Malformed checkout session response", 502)
        logger.info("stripe.response session=%s", session.get("id"))
        return session

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return f"HTTP {response.status_code}"
