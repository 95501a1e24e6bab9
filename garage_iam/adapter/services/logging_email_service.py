import logging

from garage_iam.app.services.notification_service import INotificationService
from garage_iam.app.use_cases.invites.invite_access import build_invite_link
from garage_iam.domain.notifications import InviteEmail, OtpEmail

logger = logging.getLogger(__name__)


class LoggingEmailService(INotificationService):
    """
    Development sender used when no Resend API key is configured.

    Nothing leaves the process; the link or code is written to the log so
    the flow can be completed locally.
    """

    async def send_invite_email(self, message: InviteEmail) -> None:
        logger.info(
            f"Invite email for {message.to} ({message.garage_name}, {message.role}): "
            f"{build_invite_link(message.raw_token)}"
        )

    async def send_otp_email(self, message: OtpEmail) -> None:
        logger.info(
            f"Verification code for {message.to} ({message.garage_name}): {message.code}"
        )
