"""
Cloudflare Turnstile token verification.
"""

import logging
from typing import Optional

import httpx

from leadintake.models.lead import ChallengeResult

logger = logging.getLogger(__name__)


class TurnstileVerifier:
    def __init__(self, secret_key: str, verify_url: str, client: httpx.AsyncClient):
        self.secret_key = secret_key
        self.verify_url = verify_url
        self.client = client

    async def verify(self, token: str, remote_ip: Optional[str] = None) -> ChallengeResult:
        """
        Check a widget token with the siteverify endpoint.

        Only a 2xx JSON object with `success: true` counts as verified. Any
        other status, body shape or transport error is a rejection carrying
        diagnostic details for operators.
        """
        form = {"secret": self.secret_key, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip

        try:
            response = await self.client.post(self.verify_url, data=form)
        except httpx.HTTPError as e:
            logger.error(f"❌ Turnstile verification request failed: {type(e).__name__}")
            return ChallengeResult(verified=False, details=str(e) or type(e).__name__)

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            logger.warning(f"⚠️ Turnstile returned HTTP {response.status_code}")
            return ChallengeResult(
                verified=False,
                details={"status": response.status_code, "body": data},
            )

        if not isinstance(data, dict) or data.get("success") is not True:
            codes = data.get("error-codes") if isinstance(data, dict) else None
            logger.warning(f"⚠️ Turnstile rejected token: {codes}")
            return ChallengeResult(verified=False, details=data)

        return ChallengeResult(verified=True)
