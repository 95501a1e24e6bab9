"""
Create Invite Use Case

Handles inviting someone to join a garage with a given role.
"""

import logging
from datetime import datetime
from typing import Callable

from garage_iam.app.services.notification_dispatcher import NotificationDispatcher
from garage_iam.app.services.notification_service import INotificationService
from garage_iam.app.services.unit_of_work import UnitOfWork
from garage_iam.domain.base import utc_now
from garage_iam.domain.email import is_plausible_email, normalize_email
from garage_iam.domain.entities import MembershipRole
from garage_iam.domain.invite_state_machine import InviteStateMachine
from garage_iam.libs.result import Error, Result, Return

from .dtos import CreateInviteCommand, InviteCreatedResponse
from .invite_access import build_invite_link, require_invite_manager

logger = logging.getLogger(__name__)


class CreateInviteUseCase:
    """
    Use case for inviting someone to a garage.

    Business Rules:
    - Only owners and managers can invite
    - Role must be one of OWNER, MANAGER, MECHANIC, STOREKEEPER, VIEWER
    - Email is normalized (trimmed, lowercased)
    - At most one active pending invite per garage and email
    - Existing members cannot be invited again
    - Invite expires after 7 days; only the token hash is stored
    - The invite email is sent after commit; a delivery failure does not
      undo the invite, and the link is returned for manual sharing
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

    async def execute(self, command: CreateInviteCommand) -> Result[InviteCreatedResponse]:
        """
        Execute create invite use case.

        Args:
            command: Tenant, inviter, email and role

        Returns:
            Result with InviteCreatedResponse DTO (including the invite link),
            or Error
        """
        now = self.clock()

        try:
            role = MembershipRole(command.role)
        except ValueError:
            allowed = ", ".join(r.value for r in MembershipRole)
            return Return.err(
                Error("INVALID_ROLE", f"Invalid role: {command.role}. Must be one of: {allowed}")
            )

        email = normalize_email(command.email)
        if not is_plausible_email(email):
            return Return.err(Error("INVALID_EMAIL", "A valid email address is required"))

        async with self.uow:
            access_error = await require_invite_manager(
                self.uow, command.inviter_id, command.tenant_id
            )
            if access_error:
                return Return.err(access_error)

            tenant = await self.uow.tenants.get_by_id(command.tenant_id)
            if tenant is None:
                return Return.err(Error("TENANT_NOT_FOUND", "Garage not found"))

            pending = await self.uow.invites.get_active_pending(
                command.tenant_id, email, now
            )
            if pending:
                return Return.err(
                    Error(
                        "INVITE_ALREADY_EXISTS",
                        "A pending invite already exists for this email",
                    )
                )

            existing_user = await self.uow.users.get_by_email(email)
            if existing_user:
                membership = await self.uow.memberships.get_by_user_and_tenant(
                    existing_user.id, command.tenant_id
                )
                if membership:
                    return Return.err(
                        Error("ALREADY_MEMBER", "User is already a member of this garage")
                    )

            inviter = await self.uow.users.get_by_id(command.inviter_id)
            inviter_name = inviter.name if inviter else "A teammate"

            invite, issued = self.machine.create(
                tenant_id=command.tenant_id,
                inviter_id=command.inviter_id,
                email=email,
                role=role,
                garage_name=tenant.name,
                inviter_name=inviter_name,
                now=now,
            )
            await self.uow.invites.create(invite)

            await self.uow.commit()

        logger.info(f"Invite {invite.id} created for tenant {command.tenant_id}")

        email_sent = await self.dispatcher.dispatch(issued.notifications)

        return Return.ok(
            InviteCreatedResponse(
                invite_id=str(invite.id),
                email=invite.email,
                role=invite.role.value,
                status=invite.status.value,
                expires_at=invite.expires_at.isoformat(),
                invite_link=build_invite_link(issued.raw_token),
                email_sent=email_sent,
            )
        )
