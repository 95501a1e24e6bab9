from abc import ABC, abstractmethod
from typing import Optional

from garage_iam.domain.notifications import InviteEmail, OtpEmail


class NotificationDeliveryError(Exception):
    """The transport gave up delivering a message (after its own retries)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class INotificationService(ABC):
    """Notification port - transactional email used by the invite flow"""

    @abstractmethod
    async def send_invite_email(self, message: InviteEmail) -> None:
        """
        Send the invitation link.

        Raises:
            NotificationDeliveryError: delivery failed
        """
        pass

    @abstractmethod
    async def send_otp_email(self, message: OtpEmail) -> None:
        """
        Send a verification code.

        Raises:
            NotificationDeliveryError: delivery failed
        """
        pass
