"""
Revoke Invite Use Case

Handles withdrawing an invite that has not been accepted.
"""

import logging
from uuid import UUID

from garage_iam.app.services.unit_of_work import UnitOfWork
from garage_iam.domain import invite_policy as policy
from garage_iam.libs.result import Error, Result, Return

from .dtos import RevokeInviteResponse
from .invite_access import load_tenant_invite, require_invite_manager

logger = logging.getLogger(__name__)


class RevokeInviteUseCase:
    """
    Use case for revoking invites.

    Business Rules:
    - Only owners and managers can revoke
    - The invite record is deleted, so its link stops resolving
    - Accepted invites cannot be revoked
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, user_id: UUID, tenant_id: UUID, invite_id: UUID
    ) -> Result[RevokeInviteResponse]:
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
                        "Cannot revoke an invite that has already been accepted",
                    )
                )

            await self.uow.invites.delete(invite)
            await self.uow.commit()

        logger.info(f"Invite {invite_id} revoked by user {user_id}")

        return Return.ok(RevokeInviteResponse(status="revoked"))
