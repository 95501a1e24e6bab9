"""
Get Invite Use Case

Admin view of a single invite.
"""

from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from garage_iam.app.services.unit_of_work import UnitOfWork
from garage_iam.domain.base import utc_now
from garage_iam.libs.result import Result, Return

from .dtos import InviteCreator, InviteDetailResponse
from .invite_access import load_tenant_invite, require_invite_manager
from .list_invites_use_case import summarize_invite


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class GetInviteUseCase:
    """
    Use case for viewing one of a garage's invites.

    Business Rules:
    - Only owners and managers can view
    - Invites of other garages are reported as not found
    - Tokens, codes and hashes are never included
    """

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utc_now):
        self.uow = uow
        self.clock = clock

    async def execute(
        self, user_id: UUID, tenant_id: UUID, invite_id: UUID
    ) -> Result[InviteDetailResponse]:
        now = self.clock()

        async with self.uow:
            access_error = await require_invite_manager(self.uow, user_id, tenant_id)
            if access_error:
                return Return.err(access_error)

            loaded = await load_tenant_invite(self.uow, tenant_id, invite_id)
            if loaded.is_err():
                return loaded
            invite = loaded.value

            creator = await self.uow.users.get_by_id(invite.created_by_user_id)

            detail = InviteDetailResponse(
                **summarize_invite(invite, now).model_dump(),
                used_at=_iso(invite.used_at),
                locked_until=_iso(invite.locked_until),
                otp_last_sent_at=_iso(invite.otp_last_sent_at),
                created_by=(
                    InviteCreator(name=creator.name, email=creator.email)
                    if creator
                    else None
                ),
            )

        return Return.ok(detail)
