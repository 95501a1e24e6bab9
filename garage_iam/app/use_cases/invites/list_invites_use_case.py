"""
List Invites Use Case

Admin listing of a garage's invites.
"""

from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from garage_iam.app.services.unit_of_work import UnitOfWork
from garage_iam.domain import invite_policy as policy
from garage_iam.domain.base import utc_now
from garage_iam.domain.entities import Invite, InviteStatus
from garage_iam.libs.result import Error, Result, Return

from .dtos import InviteSummary, ListInvitesResponse
from .invite_access import require_invite_manager


def summarize_invite(invite: Invite, now: datetime) -> InviteSummary:
    return InviteSummary(
        id=str(invite.id),
        email=invite.email,
        role=invite.role.value,
        status=policy.effective_status(invite, now).value,
        expires_at=invite.expires_at.isoformat(),
        is_expired=policy.is_expired(invite, now),
        is_locked=policy.is_locked(invite, now),
        otp_sent=invite.otp_hash is not None,
        otp_send_count=invite.otp_send_count,
        otp_attempts=invite.otp_attempts,
        created_by_user_id=str(invite.created_by_user_id),
        created_at=invite.created_at.isoformat(),
    )


class ListInvitesUseCase:
    """
    Use case for listing a garage's invites.

    Business Rules:
    - Only owners and managers can list
    - Status filter applies to the effective status (PENDING, ACCEPTED, EXPIRED)
    - Tokens, codes and hashes are never included
    """

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utc_now):
        self.uow = uow
        self.clock = clock

    async def execute(
        self, user_id: UUID, tenant_id: UUID, status: Optional[str] = None
    ) -> Result[ListInvitesResponse]:
        now = self.clock()

        status_filter = None
        if status:
            try:
                status_filter = InviteStatus(status.upper())
            except ValueError:
                allowed = ", ".join(s.value for s in InviteStatus)
                return Return.err(
                    Error("INVALID_STATUS", f"Invalid status: {status}. Must be one of: {allowed}")
                )

        async with self.uow:
            access_error = await require_invite_manager(self.uow, user_id, tenant_id)
            if access_error:
                return Return.err(access_error)

            invites = await self.uow.invites.list_by_tenant(tenant_id)
            summaries = [summarize_invite(invite, now) for invite in invites]

        if status_filter:
            summaries = [s for s in summaries if s.status == status_filter.value]

        return Return.ok(ListInvitesResponse(invites=summaries))
