"""
Resend transactional email client.
"""

import logging
from typing import Optional, Dict, Any

import httpx

from leadintake.models.lead import NotificationMessage, DispatchOutcome

logger = logging.getLogger(__name__)


class ResendMailer:
    def __init__(
        self,
        api_key: str,
        from_email: str,
        client: httpx.AsyncClient,
        api_url: str = "https://api.resend.com/emails",
        from_name: Optional[str] = None,
        unsubscribe_mailto: Optional[str] = None,
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.api_url = api_url
        self.unsubscribe_mailto = unsubscribe_mailto
        self.client = client

    @property
    def sender(self) -> str:
        if self.from_name:
            return f"{self.from_name} <{self.from_email}>"
        return self.from_email

    def build_payload(self, message: NotificationMessage) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "from": self.sender,
            "to": [message.to],
            "subject": message.subject,
            "text": message.text,
        }
        if message.reply_to:
            payload["reply_to"] = message.reply_to

        # Deliverability / CAN-SPAM headers for messages going to the submitter
        if message.is_courtesy:
            headers = {"X-Priority": "3"}
            if self.unsubscribe_mailto:
                headers["List-Unsubscribe"] = f"<{self.unsubscribe_mailto}>"
            payload["headers"] = headers

        return payload

    async def send(self, message: NotificationMessage) -> DispatchOutcome:
        """
        Send one message. Never raises for provider or transport problems;
        they come back as a failed outcome with the status and body captured.
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = await self.client.post(
                self.api_url, json=self.build_payload(message), headers=headers
            )
        except httpx.HTTPError as e:
            logger.error(f"❌ Resend request failed: {type(e).__name__}")
            return DispatchOutcome(sent=False, details=str(e) or type(e).__name__)

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.is_success:
            logger.error(f"❌ Resend returned HTTP {response.status_code}")
            return DispatchOutcome(
                sent=False,
                status_code=response.status_code,
                details={"status": response.status_code, "body": body if body is not None else response.text},
            )

        if not isinstance(body, dict):
            logger.error("❌ Resend returned an unreadable success response")
            return DispatchOutcome(
                sent=False,
                status_code=response.status_code,
                details={"status": response.status_code, "body": response.text},
            )

        logger.info(f"✅ Email accepted by Resend (id: {body.get('id', 'n/a')})")
        return DispatchOutcome(sent=True, status_code=response.status_code, details=body)
