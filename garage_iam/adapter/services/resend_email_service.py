"""Resend email client.

Delivers invite flow emails through the Resend REST API.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx

from garage_iam.app.services.notification_service import (
    INotificationService,
    NotificationDeliveryError,
)
from garage_iam.domain.notifications import InviteEmail, OtpEmail

from .email_messages import EmailMessage, render_invite_email, render_otp_email

logger = logging.getLogger(__name__)


def _is_retryable(status_code: int) -> bool:
    return status_code == 429 or 500 <= status_code < 600


class ResendEmailService(INotificationService):
    """Email sender backed by the Resend API.

    Rate limits (429), server errors (5xx) and transport errors are retried
    with exponential backoff: 2s after the first failure, 4s after the
    second. Any other 4xx fails immediately.
    """

    def __init__(
        self,
        api_key: str,
        sender: str,
        api_url: str = "https://api.resend.com/emails",
        max_retries: int = 3,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize Resend client.

        Args:
            api_key: Resend API key
            sender: From address
            api_url: Emails endpoint
            max_retries: Total attempts per message
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
            sleep: Backoff sleep, replaceable in tests
        """
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url
        self.max_retries = max_retries
        self.timeout = timeout
        self._transport = transport
        self._sleep = sleep

    async def send_invite_email(self, message: InviteEmail) -> None:
        await self._send(render_invite_email(message))

    async def send_otp_email(self, message: OtpEmail) -> None:
        await self._send(render_otp_email(message))

    async def _send(self, message: EmailMessage) -> None:
        """Post one message, retrying transient failures.

        Raises:
            NotificationDeliveryError: non-retryable error or retries exhausted
        """
        payload = {
            "from": self.sender,
            "to": message.to,
            "subject": message.subject,
            "text": message.text,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        last_error: Optional[NotificationDeliveryError] = None

        async with httpx.AsyncClient(
            transport=self._transport, timeout=self.timeout
        ) as client:
            for attempt in range(1, self.max_retries + 1):
                try:
                    response = await client.post(
                        self.api_url, json=payload, headers=headers
                    )
                except httpx.HTTPError as e:
                    logger.warning(
                        f"Email attempt {attempt}/{self.max_retries} failed: {e}"
                    )
                    last_error = NotificationDeliveryError(
                        f"HTTP error sending email: {e}"
                    )
                else:
                    if response.is_success:
                        logger.info(f"Email '{message.subject}' sent")
                        return

                    logger.warning(
                        f"Email attempt {attempt}/{self.max_retries} failed: "
                        f"{response.status_code} {response.text}"
                    )
                    last_error = NotificationDeliveryError(
                        f"Email provider returned {response.status_code}",
                        status_code=response.status_code,
                    )
                    if not _is_retryable(response.status_code):
                        raise last_error

                if attempt < self.max_retries:
                    delay = 2**attempt
                    logger.info(f"Retrying email in {delay}s")
                    await self._sleep(delay)

        logger.error(f"All {self.max_retries} email attempts failed")
        raise last_error
