import logging
import smtplib
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from nextwave_functions.api.responses import HttpResponse, error_response, json_response, preflight_response
from nextwave_functions.api.schemas import ContactRequest, ContactResponse
from nextwave_functions.config import Settings, get_settings
from nextwave_functions.providers.mail.smtp import SmtpMailer

logger = logging.getLogger(__name__)

FIELD_MESSAGES = {
    "name": "Name is required",
    "email": "A valid email address is required",
    "message": "Message is required",
}
MALFORMED_MESSAGES = {
    "name": "Name must be a single line",
    "email": "A valid email address is required",
}
SEND_FAILED_MESSAGE = "Email sending failed"


class ContactService:
    def __init__(self, settings: Settings | None = None, mailer: SmtpMailer | None = None) -> None:
        self.settings = settings or get_settings()
        self.mailer = mailer or SmtpMailer(self.settings)

    async def handle(self, method: str, headers: Mapping[str, str] | Any, body: bytes | str | None) -> HttpResponse:
        if method.upper() == "OPTIONS":
            return preflight_response()
        try:
            return await self._run(method, body)
        except Exception as exc:
            logger.exception("contact.failed type=%s", exc.__class__.__name__)
            return error_response(500, SEND_FAILED_MESSAGE)

    async def _run(self, method: str, body: bytes | str | None) -> HttpResponse:
        if method.upper() != "POST":
            return error_response(405, "Method not allowed")

        try:
            contact = ContactRequest.model_validate_json(body or b"")
        except ValidationError as exc:
            reason = self._validation_message(exc)
            logger.info("contact.rejected reason=%s", reason)
            return error_response(400, reason)

        if not self.settings.smtp_configured:
            logger.error("contact.unavailable reason=smtp_not_configured")
            return error_response(503, "The contact service is temporarily unavailable. Please try again later.")

        try:
            await self.mailer.send(contact)
        except (smtplib.SMTPException, OSError) as exc:
            logger.exception("contact.failed type=%s", exc.__class__.__name__)
            return error_response(500, SEND_FAILED_MESSAGE)

        logger.info("contact.sent reply_to=%s", contact.email)
        return json_response(200, ContactResponse().model_dump())

    @staticmethod
    def _validation_message(exc: ValidationError) -> str:
        errors = exc.errors()
        if not errors:
            return "Invalid request"
        first = errors[0]
        if first.get("type") == "json_invalid":
            return "Invalid JSON in request body"
        if first.get("type") == "model_type":
            return "Request body must be a JSON object"
        field_name = str((first.get("loc") or ("",))[0])
        if first.get("type") == "value_error" and field_name in MALFORMED_MESSAGES:
            return MALFORMED_MESSAGES[field_name]
        return FIELD_MESSAGES.get(field_name, "Invalid request")
