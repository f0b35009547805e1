"""Transactional email through the SendGrid v3 HTTP API."""

from html import escape

import httpx
from loguru import logger

from mutuals.core.config import EmailConfig
from mutuals.core.exceptions import UpstreamError
from mutuals.infrastructure.constants import SENDGRID_SERVICE

WELCOME_SUBJECT = "Welcome to Mutuals+ Newsletter!"
CONTACT_CONFIRMATION_SUBJECT = "We received your message"
SUBMISSION_CONFIRMATION_SUBJECT = "We received your submission"


class EmailClient:
    """Send HTML emails from the configured sender address.

    Args:
        config: SendGrid credentials and addresses.
        http_client: Shared HTTP client; the caller owns its lifecycle.
    """

    def __init__(self, config: EmailConfig, http_client: httpx.AsyncClient) -> None:
        self.config = config
        self._http = http_client
        if not config.sendgrid_api_key:
            logger.warning("SendGrid API key not set, outgoing email is disabled")

    @property
    def is_configured(self) -> bool:
        return self.config.sendgrid_api_key is not None

    async def send(self, to: str | list[str], subject: str, html: str) -> None:
        """Send one message.

        Args:
            to: Recipient address or addresses.
            subject: Subject line.
            html: HTML body.

        Raises:
            UpstreamError: If the service is not configured or rejects the call.
        """
        if not self.config.sendgrid_api_key:
            raise UpstreamError("Email service not configured", SENDGRID_SERVICE)

        recipients = [to] if isinstance(to, str) else to
        payload = {
            "personalizations": [{"to": [{"email": r} for r in recipients]}],
            "from": {"email": self.config.email_from},
            "subject": subject,
            "content": [{"type": "text/html", "value": html}],
        }

        try:
            response = await self._http.post(
                self.config.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.config.sendgrid_api_key}"},
                timeout=self.config.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "SendGrid rejected email: {}",
                e.response.status_code,
                status_code=e.response.status_code,
                subject=subject,
            )
            raise UpstreamError(
                "Email delivery failed",
                SENDGRID_SERVICE,
                context={"status_code": e.response.status_code},
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError("Email delivery failed", SENDGRID_SERVICE, cause=e) from e

        logger.info("Email sent to {} recipient(s)", len(recipients), subject=subject)

    async def send_welcome_email(self, email: str, name: str | None = None) -> None:
        """Greet a new newsletter subscriber."""
        html = (
            '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
            '<h1 style="color: #333;">Welcome to Mutuals+!</h1>'
            f"<p>Hi {escape(name or 'there')},</p>"
            "<p>Thank you for subscribing to the Mutuals+ newsletter!</p>"
            "<p>You'll now receive updates about:</p>"
            "<ul><li>Emerging artists, DJs, and designers</li>"
            "<li>Curated playlists and mixes</li>"
            "<li>Exclusive events</li>"
            "<li>Limited merchandise drops</li></ul>"
            "<p>Stay tuned for amazing content!</p>"
            '<p style="margin-top: 30px;">Best regards,<br/>The Mutuals+ Team</p>'
            "</div>"
        )
        await self.send(email, WELCOME_SUBJECT, html)

    async def send_contact_notification(
        self, name: str, email: str, message: str, subject: str | None = None
    ) -> None:
        """Forward a contact form message to the team inbox."""
        subject_line = subject or "No Subject"
        html = (
            '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
            "<h2>New Contact Form Submission</h2>"
            f"<p><strong>Name:</strong> {escape(name)}</p>"
            f"<p><strong>Email:</strong> {escape(email)}</p>"
            f"<p><strong>Subject:</strong> {escape(subject_line)}</p>"
            "<p><strong>Message:</strong></p>"
            '<p style="padding: 15px; background-color: #f5f5f5; '
            f'border-left: 4px solid #333;">{escape(message)}</p>'
            "</div>"
        )
        await self.send(
            self.config.email_info,
            f"New Contact Form Submission: {subject_line}",
            html,
        )

    async def send_submission_confirmation(
        self, email: str, name: str, kind: str = "contact"
    ) -> None:
        """Acknowledge a submission to the person who sent it."""
        first_name = name.split(" ")[0]
        subject = (
            CONTACT_CONFIRMATION_SUBJECT
            if kind == "contact"
            else SUBMISSION_CONFIRMATION_SUBJECT
        )
        html = (
            '<div style="font-family: \'Helvetica Neue\', Arial, sans-serif; '
            'max-width: 600px; margin: 0 auto; padding: 40px 20px; color: #333;">'
            f"<p>Hi {escape(first_name)},</p>"
            "<p>We've received your submission and appreciate you sharing your "
            "work with Mutuals+.<br/>Our team is currently reviewing entries and "
            "typically responds within 2-3 business days.</p>"
            "<p>While you're here, stay connected:</p>"
            "<ul>"
            '<li>Curated sounds: <a href="https://mutualsplus.com/playlists">'
            "Explore Playlists</a></li>"
            '<li>Follow us on Instagram &amp; X: <a href="https://instagram.com/'
            'mutualsplus">@mutualsplus</a></li>'
            '<li>Editorial drops &amp; events: <a href="https://mutualsplus.com/'
            '#newsletter">Subscribe to Newsletter</a></li>'
            "</ul>"
            "<p>With respect,<br/><strong>Mutuals+</strong></p>"
            "</div>"
        )
        await self.send(email, subject, html)
