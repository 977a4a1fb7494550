import logging
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from nextwave_functions.api.responses import HttpResponse, error_response, header_value, json_response, preflight_response
from nextwave_functions.api.schemas import CheckoutRequest, CheckoutResponse
from nextwave_functions.config import Settings, get_settings
from nextwave_functions.providers.payments.stripe_checkout import CheckoutProviderError, StripeCheckout

logger = logging.getLogger(__name__)

INVALID_PLAN_MESSAGE = "Invalid plan selected"
FAILED_MESSAGE = "Failed to create checkout session"


class CheckoutService:
    def __init__(self, settings: Settings | None = None, checkout: StripeCheckout | None = None) -> None:
        self.settings = settings or get_settings()
        self.checkout = checkout or StripeCheckout(self.settings)

    async def handle(self, method: str, headers: Mapping[str, str] | Any, body: bytes | str | None) -> HttpResponse:
        if method.upper() == "OPTIONS":
            return preflight_response()
        try:
            return await self._run(method, headers, body)
        except Exception as exc:
            logger.exception("checkout.failed type=%s", exc.__class__.__name__)
            return error_response(500, FAILED_MESSAGE)

    async def _run(self, method: str, headers: Mapping[str, str] | Any, body: bytes | str | None) -> HttpResponse:
        if method.upper() != "POST":
            return error_response(405, "Method not allowed")

        try:
            request = CheckoutRequest.model_validate_json(body or b"")
        except ValidationError:
            logger.info("checkout.rejected reason=unparseable")
            return error_response(400, INVALID_PLAN_MESSAGE)

        price_id = self.settings.plan_prices().get(request.plan)
        if not price_id:
            logger.info("checkout.rejected reason=unknown_plan plan=%s", request.plan[:40])
            return error_response(400, INVALID_PLAN_MESSAGE)

        if not self.settings.stripe_secret_key:
            logger.error("checkout.unavailable reason=missing_secret_key")
            return error_response(503, "Checkout is temporarily unavailable. Please try again later.")

        origin = (header_value(headers, "origin") or self.settings.site_url).rstrip("/")
        mode = "subscription" if request.plan in self.settings.subscription_plans() else "payment"
        try:
            session = await self.checkout.create_session(
                price_id=price_id,
                mode=mode,
                success_url=f"{origin}/onboarding?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{origin}#pricing",
            )
        except CheckoutProviderError as exc:
            if exc.status_code < 500:
                # Stripe 4xx messages describe the submitted session (price, URLs) and are shown as-is.
                logger.info("checkout.rejected reason=provider status_code=%d", exc.status_code)
                return error_response(400, exc.message)
            logger.error("checkout.failed status_code=%d detail=%s", exc.status_code, exc.message)
            return error_response(502, FAILED_MESSAGE)
        except httpx.HTTPError as exc:
            logger.error("checkout.failed type=%s detail=%s", exc.__class__.__name__, exc)
            return error_response(502, FAILED_MESSAGE)

        session_id = str(session.get("id") or "")
        if not session_id:
            logger.error("checkout.failed reason=missing_session_id")
            return error_response(502, FAILED_MESSAGE)
        logger.info("checkout.created plan=%s mode=%s session=%s", request.plan, mode, session_id)
        return json_response(200, CheckoutResponse(session_id=session_id).model_dump(by_alias=True))
