"""
Verify Invite Code Use Case

Checks a verification code and, on success, hands out the short-lived
verification token that acceptance requires.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from garage_iam.app.repositories.errors import ConcurrentUpdateError
from garage_iam.app.services.unit_of_work import UnitOfWork
from garage_iam.domain import invite_policy as policy
from garage_iam.domain.base import utc_now
from garage_iam.domain.invite_state_machine import InviteStateMachine
from garage_iam.libs.result import Result, Return

from .dtos import VerifyCodeResponse
from .invite_access import concurrent_update_error, load_invite_by_raw_token

logger = logging.getLogger(__name__)


class VerifyInviteCodeUseCase:
    """
    Use case for verifying an invite code.

    Business Rules:
    - Guard order: locked, 6-digit shape, code sent, code not expired, match
    - Every wrong code is counted; the 5th locks the invite for 1 hour
    - The failed-attempt counter and the lock are committed together
    - A correct code clears the code and returns a verification token
      (valid 10 minutes) that is stored only as a hash
    """

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utc_now):
        self.uow = uow
        self.machine = InviteStateMachine()
        self.clock = clock

    async def execute(
        self, raw_token: str, code: Optional[str]
    ) -> Result[VerifyCodeResponse]:
        """
        Execute verify code use case.

        Args:
            raw_token: Invite token from the link
            code: 6-digit code typed by the user

        Returns:
            Result with VerifyCodeResponse DTO, or Error
            (INVALID_OTP carries remaining_attempts, INVITE_LOCKED carries
            retry_after_seconds)
        """
        now = self.clock()

        async with self.uow:
            loaded = await load_invite_by_raw_token(self.uow, raw_token, now)
            if loaded.is_err():
                return loaded
            invite = loaded.value

            self.machine.release_elapsed_lock(invite, now)
            was_locked = policy.is_locked(invite, now)
            verified = self.machine.verify_code(invite, code, now)

            # Attempt counter, lock and verification token all live on the
            # invite, so it is saved whatever the outcome
            try:
                await self.uow.invites.update(invite)
            except ConcurrentUpdateError:
                return Return.err(concurrent_update_error())
            await self.uow.commit()

        if verified.is_err():
            if verified.error.code == "INVITE_LOCKED" and not was_locked:
                logger.warning(f"Invite {invite.id} locked after too many wrong codes")
            return verified

        logger.info(f"Verification code accepted for invite {invite.id}")

        return Return.ok(
            VerifyCodeResponse(
                message="Email verified successfully",
                verification_token=verified.value.verification_token,
                expires_at=verified.value.expires_at.isoformat(),
            )
        )
