"""
Send Invite Code Use Case

Emails a 6-digit verification code for an invite.
"""

import logging
from datetime import datetime
from typing import Callable

from garage_iam.app.repositories.errors import ConcurrentUpdateError
from garage_iam.app.services.notification_dispatcher import NotificationDispatcher
from garage_iam.app.services.notification_service import INotificationService
from garage_iam.app.services.unit_of_work import UnitOfWork
from garage_iam.domain.base import utc_now
from garage_iam.domain.invite_state_machine import InviteStateMachine
from garage_iam.libs.result import Error, Result, Return

from .dtos import SendCodeResponse
from .invite_access import concurrent_update_error, load_invite_by_raw_token

logger = logging.getLogger(__name__)


class SendInviteCodeUseCase:
    """
    Use case for sending an invite verification code.

    Business Rules:
    - Locked invites cannot request codes (checked first)
    - At most 5 codes per rolling hour
    - Code valid for 10 minutes, a new code resets failed attempts
    - State is committed before the email goes out; if the email cannot be
      delivered the operation fails with NotificationDeliveryError
    """

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: INotificationService,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.uow = uow
        self.dispatcher = NotificationDispatcher(notifier)
        self.machine = InviteStateMachine()
        self.clock = clock

    async def execute(self, raw_token: str) -> Result[SendCodeResponse]:
        """
        Execute send code use case.

        Args:
            raw_token: Invite token from the link

        Returns:
            Result with SendCodeResponse DTO, or Error
            (INVITE_LOCKED / OTP_SEND_LIMIT_EXCEEDED carry retry_after_seconds)

        Raises:
            NotificationDeliveryError: the code email could not be delivered
        """
        now = self.clock()

        async with self.uow:
            loaded = await load_invite_by_raw_token(self.uow, raw_token, now)
            if loaded.is_err():
                return loaded
            invite = loaded.value

            tenant = await self.uow.tenants.get_by_id(invite.tenant_id)
            if tenant is None:
                return Return.err(Error("TENANT_NOT_FOUND", "Garage not found"))

            unlocked = self.machine.release_elapsed_lock(invite, now)
            sent = self.machine.send_code(invite, tenant.name, now)

            if sent.is_err() and not unlocked:
                return sent

            try:
                await self.uow.invites.update(invite)
            except ConcurrentUpdateError:
                return Return.err(concurrent_update_error())
            await self.uow.commit()

        if sent.is_err():
            return sent

        logger.info(
            f"Verification code sent for invite {invite.id} "
            f"({sent.value.send_count} in current window)"
        )

        await self.dispatcher.dispatch(sent.value.notifications)

        return Return.ok(
            SendCodeResponse(
                message="Verification code sent",
                expires_at=sent.value.expires_at.isoformat(),
                remaining_sends=sent.value.remaining_sends,
            )
        )
