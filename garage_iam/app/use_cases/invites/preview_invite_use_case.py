"""
Preview Invite Use Case

Read-only view of an invite for the landing page behind the invite link.
"""

from datetime import datetime
from typing import Callable

from garage_iam.app.services.unit_of_work import UnitOfWork
from garage_iam.domain import invite_policy as policy
from garage_iam.domain.base import utc_now
from garage_iam.domain.email import mask_email
from garage_iam.libs.result import Error, Result, Return

from .dtos import InvitePreviewResponse
from .invite_access import load_invite_by_raw_token


class PreviewInviteUseCase:
    """
    Use case for previewing an invite by its token.

    Business Rules:
    - Same token guards as every other public invite operation
    - Email is masked: "bo***@x.com"
    - Never mutates the invite
    """

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utc_now):
        self.uow = uow
        self.clock = clock

    async def execute(self, raw_token: str) -> Result[InvitePreviewResponse]:
        now = self.clock()

        async with self.uow:
            loaded = await load_invite_by_raw_token(self.uow, raw_token, now)
            if loaded.is_err():
                return loaded
            invite = loaded.value

            tenant = await self.uow.tenants.get_by_id(invite.tenant_id)
            if tenant is None:
                return Return.err(Error("TENANT_NOT_FOUND", "Garage not found"))

            return Return.ok(
                InvitePreviewResponse(
                    garage_name=tenant.name,
                    role=invite.role.value,
                    email=mask_email(invite.email),
                    status=policy.effective_status(invite, now).value,
                    expires_at=invite.expires_at.isoformat(),
                    otp_sent=invite.otp_hash is not None,
                    is_locked=policy.is_locked(invite, now),
                )
            )
