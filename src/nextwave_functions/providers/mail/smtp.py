import asyncio
import html
import logging
import smtplib
import ssl
from email.message import EmailMessage

from nextwave_functions.api.schemas import ContactRequest
from nextwave_functions.config import Settings

logger = logging.getLogger(__name__)
IMPLICIT_TLS_PORT = 465


class SmtpMailer:
    """Delivers contact-form submissions to the site's own mailbox."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def send(self, contact: ContactRequest) -> None:
        message = self.build_message(contact)
        logger.info(
            "smtp.send host=%s port=%d user=%s",
            self.settings.smtp_host,
            self.settings.smtp_port,
            self.settings.smtp_user,
        )
        await asyncio.to_thread(self._deliver, message)

    def build_message(self, contact: ContactRequest) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.settings.smtp_user
        message["To"] = self.settings.smtp_user
        message["Reply-To"] = contact.email
        message["Subject"] = f"New Contact Form Message from {contact.name}"
        message.set_content(self._text_body(contact))
        message.add_alternative(self._html_body(contact), subtype="html")
        return message

    def _text_body(self, contact: ContactRequest) -> str:
        return "\n".join(
            [
                "New Contact Form Submission",
                "",
                f"Name: {contact.name}",
                f"Email: {contact.email}",
                "",
                "Message:",
                contact.message,
                "",
                "--",
                f"Sent from {self.settings.site_name} contact form",
            ]
        )

    def _html_body(self, contact: ContactRequest) -> str:
        name = html.escape(contact.name)
        email = html.escape(contact.email)
        body = html.escape(contact.message).replace("\n", "<br>")
        site = html.escape(self.settings.site_name)
        return (
            '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
            '<h2 style="color: #3A36DB;">New Contact Form Submission</h2>'
            '<div style="background: #f8f9fa; padding: 20px; border-radius: 8px;">'
            f"<p><strong>Name:</strong> {name}</p>"
            f'<p><strong>Email:</strong> <a href="mailto:{email}">{email}</a></p>'
            "<p><strong>Message:</strong></p>"
            '<div style="white-space: pre-wrap; background: white; padding: 15px; border-radius: 4px; margin-top: 10px;">'
            f"{body}"
            "</div></div>"
            f'<p style="color: #666; font-size: 12px; margin-top: 20px;">'
            f"This message was sent from the {site} contact form.</p>"
            "</div>"
        )

    def _deliver(self, message: EmailMessage) -> None:
        host = self.settings.smtp_host
        port = self.settings.smtp_port
        timeout = self.settings.smtp_timeout_seconds
        context = ssl.create_default_context()
        if port == IMPLICIT_TLS_PORT:
            smtp = smtplib.SMTP_SSL(host, port, timeout=timeout, context=context)
        else:
            smtp = smtplib.SMTP(host, port, timeout=timeout)
        with smtp:
            if port != IMPLICIT_TLS_PORT:
                smtp.starttls(context=context)
            smtp.login(self.settings.smtp_user, self.settings.smtp_pass)
            smtp.send_message(message)
