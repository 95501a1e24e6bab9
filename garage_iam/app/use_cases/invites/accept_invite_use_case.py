"""
Accept Invite Use Case

Handles accepting a verified invite for both existing and new users.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

import bcrypt

from garage_iam.api.utils.jwt import create_access_token
from garage_iam.app.repositories.errors import (
    ConcurrentUpdateError,
    DuplicateRecordError,
)
from garage_iam.app.services.unit_of_work import UnitOfWork
from garage_iam.domain import invite_policy as policy
from garage_iam.domain.base import utc_now
from garage_iam.domain.entities import Membership, MembershipStatus, User
from garage_iam.domain.invite_state_machine import InviteStateMachine
from garage_iam.libs.result import Error, Result, Return

from .dtos import AcceptInviteCommand, AcceptInviteResponse
from .invite_access import concurrent_update_error, load_invite_by_raw_token

logger = logging.getLogger(__name__)


def _duplicate_membership_error() -> Error:
    return Error(
        "DUPLICATE_MEMBERSHIP", "You are already a member of this garage"
    )


class AcceptInviteUseCase:
    """
    Use case for accepting an invite.

    Business Rules:
    - A verification token from a successful code check is required
    - Name must be non-empty and password at least 8 characters
    - The account is looked up by the invite's email, never the request's
    - Already a member: success with the existing role, nothing created
    - Existing account without membership: membership only
    - No account: user + membership; the request's name and password are
      used only for the new account
    - Membership role is always the invite's role
    - A concurrent duplicate membership surfaces as DUPLICATE_MEMBERSHIP
    """

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utc_now):
        self.uow = uow
        self.machine = InviteStateMachine()
        self.clock = clock

    async def execute(
        self, raw_token: str, command: AcceptInviteCommand
    ) -> Result[AcceptInviteResponse]:
        """
        Execute accept invite use case.

        Args:
            raw_token: Invite token from the link
            command: Verification token, name and password

        Returns:
            Result with AcceptInviteResponse DTO (including a 15-minute
            access token), or Error
        """
        now = self.clock()

        async with self.uow:
            loaded = await load_invite_by_raw_token(self.uow, raw_token, now)
            if loaded.is_err():
                return loaded
            invite = loaded.value

            verification_error = self.machine.check_verification(
                invite, command.verification_token, now
            )
            if verification_error:
                return Return.err(verification_error)

            name = (command.name or "").strip()
            if not name:
                return Return.err(Error("VALIDATION_ERROR", "Name is required"))

            if not policy.is_password_acceptable(command.password):
                return Return.err(
                    Error(
                        "VALIDATION_ERROR",
                        f"Password must be at least {policy.MIN_PASSWORD_LENGTH} "
                        "characters long",
                    )
                )

            tenant = await self.uow.tenants.get_by_id(invite.tenant_id)
            if tenant is None:
                return Return.err(Error("TENANT_NOT_FOUND", "Garage not found"))

            user = await self.uow.users.get_by_email(invite.email)
            is_new_user = user is None

            membership = None
            if user is not None:
                membership = await self.uow.memberships.get_by_user_and_tenant(
                    user.id, tenant.id
                )

            already_member = membership is not None

            try:
                if user is None:
                    password_hash = bcrypt.hashpw(
                        command.password.encode("utf-8"), bcrypt.gensalt(rounds=12)
                    ).decode("utf-8")
                    user = await self.uow.users.create(
                        User(
                            name=name,
                            email=invite.email,
                            password_hash=password_hash,
                            created_at=now,
                        )
                    )

                if membership is None:
                    membership = await self.uow.memberships.create(
                        Membership(
                            tenant_id=tenant.id,
                            user_id=user.id,
                            role=invite.role,
                            status=MembershipStatus.active,
                            created_at=now,
                        )
                    )
            except DuplicateRecordError:
                return Return.err(_duplicate_membership_error())

            self.machine.complete(invite, now)

            try:
                await self.uow.invites.update(invite)
            except ConcurrentUpdateError:
                return Return.err(concurrent_update_error())

            await self.uow.commit()

        role = membership.role.value

        if already_member:
            logger.info(
                f"Invite {invite.id} accepted by existing member {user.id} "
                f"of tenant {tenant.id}"
            )
        else:
            logger.info(
                f"Invite {invite.id} accepted: user {user.id} joined tenant "
                f"{tenant.id} as {role}"
            )

        access_token = create_access_token(
            user_id=str(user.id),
            tenant_id=str(tenant.id),
            role=role,
            expires_delta=timedelta(minutes=15),
        )

        return Return.ok(
            AcceptInviteResponse(
                message=(
                    "You are already a member of this garage"
                    if already_member
                    else "Invite accepted successfully"
                ),
                user_id=str(user.id),
                name=user.name,
                email=user.email,
                tenant_id=str(tenant.id),
                tenant_name=tenant.name,
                role=role,
                is_new_user=is_new_user,
                already_member=already_member,
                access_token=access_token,
            )
        )
