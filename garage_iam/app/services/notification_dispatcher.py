import logging
from typing import Sequence

from garage_iam.app.services.notification_service import (
    INotificationService,
    NotificationDeliveryError,
)
from garage_iam.domain.notifications import InviteEmail, NotificationIntent, OtpEmail

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Executes notification intents after the state change is committed.

    A failed intent marked `required` re-raises NotificationDeliveryError so
    the visible operation fails; any other failed intent is logged and
    reported as undelivered. Committed state is never touched here.
    """

    def __init__(self, notifier: INotificationService):
        self.notifier = notifier

    async def dispatch(self, intents: Sequence[NotificationIntent]) -> bool:
        """
        Send every intent in order.

        Returns:
            True if every message was delivered
        """
        delivered = True
        for intent in intents:
            try:
                await self._send(intent)
            except NotificationDeliveryError as exc:
                if intent.required:
                    logger.error(f"Required {intent.kind} email failed: {exc}")
                    raise
                logger.error(f"Failed to send {intent.kind} email: {exc}")
                delivered = False
        return delivered

    async def _send(self, intent: NotificationIntent) -> None:
        if isinstance(intent, InviteEmail):
            await self.notifier.send_invite_email(intent)
        elif isinstance(intent, OtpEmail):
            await self.notifier.send_otp_email(intent)
        else:
            raise TypeError(f"Unsupported notification intent: {intent!r}")
