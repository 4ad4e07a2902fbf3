import httpx
import logging
from typing import Optional
from app.config.settings import settings
from app.modules.email.templates import EmailContent

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class EmailSendError(Exception):
    pass


class EmailService:
    """Transactional email through the Resend HTTP API"""

    def __init__(self, client: Optional[httpx.Client] = None):
        self.client = client

    def send(self, to: str, content: EmailContent, template: str) -> str:
        """Send and return the provider message id. Without an API key, outside production, only logs."""
        if not settings.resend_api_key:
            if settings.is_production:
                raise EmailSendError("RESEND_API_KEY is not defined")
            logger.warning(f"RESEND_API_KEY is not defined; would send {template} email to {to}: {content.subject}")
            return "dev-mode"

        payload = {
            "from": settings.email_from,
            "to": [to],
            "subject": content.subject,
            "html": content.html,
        }
        headers = {"Authorization": f"Bearer {settings.resend_api_key}"}
        try:
            if self.client is not None:
                response = self.client.post(RESEND_API_URL, json=payload, headers=headers)
            else:
                with httpx.Client(timeout=10.0) as client:
                    response = client.post(RESEND_API_URL, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Email failed to {to}, template: {template}: {e}")
            raise EmailSendError(f"Failed to send email: {e}") from e

        message_id = response.json().get("id")
        logger.info(f"Email sent to {to}, template: {template}, id: {message_id}")
        return message_id


def get_email_service() -> EmailService:
    return EmailService()
