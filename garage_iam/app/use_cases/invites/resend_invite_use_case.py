"""
Resend Invite Use Case

Handles re-issuing a pending invite with a fresh link.
"""

import logging
from datetime import datetime
from typing import Callable
from uuid import UUID

from garage_iam.app.repositories.errors import ConcurrentUpdateError
from garage_iam.app.services.notification_dispatcher import NotificationDispatcher
from garage_iam.app.services.notification_service import INotificationService
from garage_iam.app.services.unit_of_work import UnitOfWork
from garage_iam.domain import invite_policy as policy
from garage_iam.domain.base import utc_now
from garage_iam.domain.invite_state_machine import InviteStateMachine
from garage_iam.libs.result import Error, Result, Return

from .dtos import ResendInviteResponse
from .invite_access import (
    build_invite_link,
    concurrent_update_error,
    load_tenant_invite,
    require_invite_manager,
)

logger = logging.getLogger(__name__)


class ResendInviteUseCase:
    """
    Use case for resending an invite.

    Business Rules:
    - Only owners and managers can resend
    - Accepted invites cannot be resent (expired ones can)
    - The token is rotated, so the previous link stops working
    - Expiry restarts at 7 days; code, send window, lockout and
      verification state are reset
    - Email, role, tenant and creator are preserved
    - A delivery failure does not undo the resend
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

    async def execute(
        self, user_id: UUID, tenant_id: UUID, invite_id: UUID
    ) -> Result[ResendInviteResponse]:
        """
        Execute resend invite use case.

        Args:
            user_id: User resending the invite
            tenant_id: Garage the invite belongs to
            invite_id: Invite to resend

        Returns:
            Result with ResendInviteResponse DTO (new invite link), or Error
        """
        now = self.clock()

        async with self.uow:
            access_error = await require_invite_manager(self.uow, user_id, tenant_id)
            if access_error:
                return Return.err(access_error)

            loaded = await load_tenant_invite(self.uow, tenant_id, invite_id)
            if loaded.is_err():
                return loaded
            invite = loaded.value

            if policy.is_used(invite):
                return Return.err(
                    Error(
                        "INVITATION_ALREADY_ACCEPTED",
                        "Cannot resend an invite that has already been accepted",
                    )
                )

            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if tenant is None:
                return Return.err(Error("TENANT_NOT_FOUND", "Garage not found"))

            inviter = await self.uow.users.get_by_id(user_id)
            inviter_name = inviter.name if inviter else "A teammate"

            issued = self.machine.reissue(invite, tenant.name, inviter_name, now)

            try:
                await self.uow.invites.update(invite)
            except ConcurrentUpdateError:
                return Return.err(concurrent_update_error())
            await self.uow.commit()

        logger.info(f"Invite {invite.id} resent by user {user_id}")

        email_sent = await self.dispatcher.dispatch(issued.notifications)

        return Return.ok(
            ResendInviteResponse(
                status="resent",
                expires_at=issued.expires_at.isoformat(),
                invite_link=build_invite_link(issued.raw_token),
                email_sent=email_sent,
            )
        )
