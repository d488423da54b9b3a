"""Mail Service - Outbound email through Microsoft Graph

Sends as a service mailbox (ROPC token). When the mailbox credentials are
not configured the service runs degraded: messages are logged, not sent.
"""
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import httpx

from ..config.settings import Settings
from ..domain.errors import EmailSendError
from ..templates import get_email_template, EmailTemplateKey
from ..utils.time import utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)


class MailService:
    """Graph API mail sender with a cached access token"""

    GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
    TIMEOUT_SECONDS = 15.0

    def __init__(self, settings: Settings):
        self.settings = settings
        self._access_token: Optional[str] = None
        self._token_expiry: Optional[datetime] = None

    @property
    def enabled(self) -> bool:
        return self.settings.mail_enabled

    def send_template(
        self,
        template_key: EmailTemplateKey,
        recipients: List[str],
        payload: Dict[str, Any]
    ) -> bool:
        """
        Render and send a template

        Returns:
            True if sent, False if mail is not configured

        Raises:
            EmailSendError: If Graph rejects the message
        """
        content = get_email_template(template_key, payload, self.settings.frontend_url)
        return self.send_email(recipients, content["subject"], content["body"])

    def send_email(self, recipients: List[str], subject: str, body: str) -> bool:
        if not self.enabled:
            logger.warning(
                f"Mail not configured; skipped '{subject}' to {', '.join(recipients)}",
                extra={"action": "email_skipped"}
            )
            return False

        try:
            self._send_email_via_graph(recipients, subject, body)
        except httpx.HTTPError as e:
            raise EmailSendError(
                "Email service unreachable",
                details={"error": str(e)}
            )

        logger.info(
            f"Sent email '{subject}'",
            extra={"action": "email_sent"}
        )
        return True

    def _send_email_via_graph(
        self,
        recipients: List[str],
        subject: str,
        body: str
    ) -> None:
        """Send email using Microsoft Graph API with service mailbox (ROPC)"""
        access_token = self._get_access_token()

        message = {
            "message": {
                "subject": subject,
                "body": {
                    "contentType": "HTML",
                    "content": body
                },
                "toRecipients": [
                    {"emailAddress": {"address": email}}
                    for email in recipients
                ]
            },
            "saveToSentItems": False
        }

        with httpx.Client(timeout=self.TIMEOUT_SECONDS) as client:
            response = client.post(
                f"{self.GRAPH_BASE_URL}/me/sendMail",
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Content-Type": "application/json"
                },
                json=message
            )

        if response.status_code not in [200, 202]:
            raise EmailSendError(
                f"Graph API error: {response.status_code}",
                details={"response": response.text[:500]}
            )

    def _get_access_token(self) -> str:
        """
        Get access token for service mailbox using ROPC

        Token is cached until five minutes before expiry.
        """
        if self._access_token and self._token_expiry:
            if utc_now() < self._token_expiry:
                return self._access_token

        token_url = f"https://login.microsoftonline.com/{self.settings.mail_tenant_id}/oauth2/v2.0/token"

        with httpx.Client(timeout=self.TIMEOUT_SECONDS) as client:
            response = client.post(
                token_url,
                data={
                    "client_id": self.settings.mail_client_id,
                    "client_secret": self.settings.mail_client_secret,
                    "scope": "https://graph.microsoft.com/.default",
                    "username": self.settings.service_mailbox_email,
                    "password": self.settings.service_mailbox_password,
                    "grant_type": "password"
                }
            )

        if response.status_code != 200:
            raise EmailSendError(
                f"Failed to get access token: {response.status_code}",
                details={"response": response.text[:500]}
            )

        token_data = response.json()
        self._access_token = token_data["access_token"]
        expires_in = token_data.get("expires_in", 3600)
        self._token_expiry = utc_now() + timedelta(seconds=expires_in - 300)

        return self._access_token
