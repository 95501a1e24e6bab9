"""
Invite State Machine

Decide-and-mutate transitions for one invite:

    PENDING(no code) --send_code--> PENDING(code issued)
    PENDING(code issued) --verify_code(match)--> PENDING(verified)
    PENDING(code issued) --verify_code(mismatch x5)--> LOCKED until +1h
    PENDING(verified) --complete--> ACCEPTED
    any PENDING --reissue--> PENDING(no code), new token and expiry

Transitions only mutate the in-memory invite and report what happened.
Loading, persisting and sending email belong to the use cases, which
dispatch the returned notification intents after commit.
"""

import math
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel

from garage_iam.domain import invite_policy as policy
from garage_iam.domain import token_codec
from garage_iam.domain.email import normalize_email
from garage_iam.domain.entities import Invite, InviteStatus, MembershipRole
from garage_iam.domain.notifications import InviteEmail, NotificationIntent, OtpEmail
from garage_iam.domain.otp_state import CodeExpired, Locked, NoCodeIssued, otp_state_of
from garage_iam.libs.result import Error, Result, Return


class InviteIssued(BaseModel):
    """A fresh invite token; raw_token is only ever held in memory"""

    raw_token: str
    expires_at: datetime
    notifications: List[NotificationIntent] = []


class CodeSent(BaseModel):
    expires_at: datetime
    send_count: int
    remaining_sends: int
    notifications: List[NotificationIntent] = []


class CodeVerified(BaseModel):
    """Raw verification token; only its digest stays on the invite"""

    verification_token: str
    expires_at: datetime


def _whole_minutes(seconds: int) -> int:
    return max(1, math.ceil(seconds / 60))


def _locked_error(invite: Invite, now: datetime) -> Error:
    retry_after = policy.lock_retry_after_seconds(invite, now)
    minutes = _whole_minutes(retry_after)
    return Error(
        "INVITE_LOCKED",
        f"Too many failed attempts. Please try again in {minutes} minutes.",
        details={"retry_after_seconds": retry_after},
    )


class InviteStateMachine:
    """Transitions over a single invite record"""

    def create(
        self,
        tenant_id: UUID,
        inviter_id: UUID,
        email: str,
        role: MembershipRole,
        garage_name: str,
        inviter_name: str,
        now: datetime,
    ) -> Tuple[Invite, InviteIssued]:
        """New PENDING invite with a fresh token and empty OTP state"""
        raw_token, token_hash = token_codec.generate_secret()
        invite = Invite(
            tenant_id=tenant_id,
            created_by_user_id=inviter_id,
            email=normalize_email(email),
            role=role,
            token_hash=token_hash,
            status=InviteStatus.pending,
            expires_at=now + policy.INVITE_TTL,
            created_at=now,
            updated_at=now,
        )
        return invite, self._issued(invite, raw_token, garage_name, inviter_name)

    def reissue(
        self, invite: Invite, garage_name: str, inviter_name: str, now: datetime
    ) -> InviteIssued:
        """
        Rotate the token and restart the invite.

        email, role, tenant and creator are kept; expiry, OTP, lockout and
        verification state go back to their initial values.
        """
        raw_token, token_hash = token_codec.generate_secret()
        invite.token_hash = token_hash
        invite.status = InviteStatus.pending
        invite.expires_at = now + policy.INVITE_TTL
        invite.used_at = None
        self._reset_otp_state(invite)
        invite.otp_send_count = 0
        invite.otp_last_sent_at = None
        invite.locked_until = None
        self._clear_verification(invite)
        return self._issued(invite, raw_token, garage_name, inviter_name)

    def release_elapsed_lock(self, invite: Invite, now: datetime) -> bool:
        """Implicit unlock once locked_until has passed; True if changed"""
        if not policy.lock_has_elapsed(invite, now):
            return False
        invite.locked_until = None
        invite.otp_attempts = 0
        return True

    def send_code(
        self, invite: Invite, garage_name: str, now: datetime
    ) -> Result[CodeSent]:
        """Issue a new 6-digit code. Guards: lock, then send window."""
        if policy.is_locked(invite, now):
            return Return.err(_locked_error(invite, now))

        decision = policy.can_send_otp(invite, now)
        if not decision.allowed:
            minutes = _whole_minutes(decision.retry_after_seconds)
            return Return.err(
                Error(
                    "OTP_SEND_LIMIT_EXCEEDED",
                    "Maximum verification codes sent. "
                    f"Please try again in {minutes} minutes.",
                    details={"retry_after_seconds": decision.retry_after_seconds},
                )
            )

        code, code_hash = token_codec.generate_otp_code()
        invite.otp_send_count = policy.next_send_count(invite, now)
        invite.otp_hash = code_hash
        invite.otp_expires_at = now + policy.OTP_TTL
        invite.otp_last_sent_at = now
        invite.otp_attempts = 0

        return Return.ok(
            CodeSent(
                expires_at=invite.otp_expires_at,
                send_count=invite.otp_send_count,
                remaining_sends=policy.remaining_sends(invite.otp_send_count),
                notifications=[
                    OtpEmail(to=invite.email, code=code, garage_name=garage_name)
                ],
            )
        )

    def verify_code(
        self, invite: Invite, code: Optional[str], now: datetime
    ) -> Result[CodeVerified]:
        """
        Check a presented code.

        Guard order: lock, code shape, code issued, code unexpired, digest.
        A mismatch is counted on the invite (and may lock it), so the caller
        must persist the invite whatever the outcome.
        """
        state = otp_state_of(invite, now)
        if isinstance(state, Locked):
            return Return.err(_locked_error(invite, now))

        if not token_codec.is_well_formed_code(code):
            return Return.err(
                Error("INVALID_CODE_FORMAT", "Please enter a 6-digit verification code")
            )

        if isinstance(state, NoCodeIssued):
            return Return.err(
                Error(
                    "NO_OTP_SENT",
                    "No verification code has been sent. Please request a code first.",
                )
            )

        if isinstance(state, CodeExpired):
            return Return.err(
                Error(
                    "OTP_EXPIRED",
                    "Verification code has expired. Please request a new code.",
                )
            )

        matches = token_codec.secret_matches(code, invite.otp_hash)
        outcome = policy.next_attempt_outcome(invite, now, matches)

        if outcome.locked:
            invite.otp_attempts = outcome.attempts
            invite.locked_until = outcome.locked_until
            return Return.err(_locked_error(invite, now))

        if not outcome.verified:
            invite.otp_attempts = outcome.attempts
            remaining = outcome.remaining_attempts
            plural = "s" if remaining != 1 else ""
            return Return.err(
                Error(
                    "INVALID_OTP",
                    f"Incorrect code. {remaining} attempt{plural} remaining.",
                    details={"remaining_attempts": remaining},
                )
            )

        raw_verification, verification_hash = token_codec.generate_secret()
        invite.verification_token = verification_hash
        invite.verification_token_expires_at = now + policy.VERIFICATION_TTL
        self._reset_otp_state(invite)

        return Return.ok(
            CodeVerified(
                verification_token=raw_verification,
                expires_at=invite.verification_token_expires_at,
            )
        )

    def check_verification(
        self, invite: Invite, presented: Optional[str], now: datetime
    ) -> Optional[Error]:
        """Error for a missing, wrong or stale verification token, else None"""
        if not presented:
            return Error("VERIFICATION_REQUIRED", "Email verification required")

        if not token_codec.secret_matches(presented, invite.verification_token):
            return Error(
                "INVALID_VERIFICATION",
                "Invalid verification. Please verify your email again.",
            )

        expires_at = invite.verification_token_expires_at
        if expires_at is None or expires_at <= now:
            return Error(
                "VERIFICATION_EXPIRED",
                "Verification expired. Please verify your email again.",
            )

        return None

    def complete(self, invite: Invite, now: datetime) -> None:
        """Terminal transition: the invite can never be used again"""
        invite.status = InviteStatus.accepted
        invite.used_at = now
        self._reset_otp_state(invite)
        invite.locked_until = None
        self._clear_verification(invite)

    def _issued(
        self, invite: Invite, raw_token: str, garage_name: str, inviter_name: str
    ) -> InviteIssued:
        return InviteIssued(
            raw_token=raw_token,
            expires_at=invite.expires_at,
            notifications=[
                InviteEmail(
                    to=invite.email,
                    garage_name=garage_name,
                    role=invite.role.value,
                    raw_token=raw_token,
                    inviter_name=inviter_name,
                )
            ],
        )

    @staticmethod
    def _reset_otp_state(invite: Invite) -> None:
        invite.otp_hash = None
        invite.otp_expires_at = None
        invite.otp_attempts = 0

    @staticmethod
    def _clear_verification(invite: Invite) -> None:
        invite.verification_token = None
        invite.verification_token_expires_at = None
