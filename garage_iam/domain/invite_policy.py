"""
Invite Rate/Lockout Policy

Pure decision functions over an invite's OTP/lockout sub-state and the
current time. Nothing here touches storage or mutates the invite; the
invite state machine applies the decisions.
"""

import math
from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel

from garage_iam.domain.entities import Invite, InviteStatus

INVITE_TTL = timedelta(days=7)
OTP_TTL = timedelta(minutes=10)
VERIFICATION_TTL = timedelta(minutes=10)

MAX_OTP_ATTEMPTS = 5
LOCKOUT_DURATION = timedelta(hours=1)

MAX_OTP_SENDS_PER_WINDOW = 5
OTP_SEND_WINDOW = timedelta(hours=1)

MIN_PASSWORD_LENGTH = 8


class SendDecision(BaseModel):
    """Whether another code may be sent right now"""

    allowed: bool
    retry_after_seconds: Optional[int] = None


class AttemptOutcome(BaseModel):
    """Result of checking one presented code against the stored digest"""

    verified: bool = False
    attempts: int
    remaining_attempts: Optional[int] = None
    locked: bool = False
    locked_until: Optional[datetime] = None


def _seconds_until(deadline: datetime, now: datetime) -> int:
    return max(0, math.ceil((deadline - now).total_seconds()))


def is_locked(invite: Invite, now: datetime) -> bool:
    return invite.locked_until is not None and invite.locked_until > now


def lock_has_elapsed(invite: Invite, now: datetime) -> bool:
    """A lock was set and its time has passed (implicit unlock is due)"""
    return invite.locked_until is not None and invite.locked_until <= now


def lock_retry_after_seconds(invite: Invite, now: datetime) -> int:
    if invite.locked_until is None:
        return 0
    return _seconds_until(invite.locked_until, now)


def _within_send_window(invite: Invite, now: datetime) -> bool:
    return (
        invite.otp_last_sent_at is not None
        and invite.otp_last_sent_at > now - OTP_SEND_WINDOW
    )


def can_send_otp(invite: Invite, now: datetime) -> SendDecision:
    """
    At most MAX_OTP_SENDS_PER_WINDOW codes inside the hour anchored at the
    last send. When blocked, retry_after_seconds runs to the window's end.
    """
    if _within_send_window(invite, now) and (
        invite.otp_send_count >= MAX_OTP_SENDS_PER_WINDOW
    ):
        window_end = invite.otp_last_sent_at + OTP_SEND_WINDOW
        return SendDecision(
            allowed=False, retry_after_seconds=_seconds_until(window_end, now)
        )
    return SendDecision(allowed=True)


def next_send_count(invite: Invite, now: datetime) -> int:
    """Send counter after one more send; an elapsed window starts over at 1"""
    current = invite.otp_send_count if _within_send_window(invite, now) else 0
    return current + 1


def remaining_sends(send_count: int) -> int:
    return max(0, MAX_OTP_SENDS_PER_WINDOW - send_count)


def next_attempt_outcome(
    invite: Invite, now: datetime, code_matches: bool
) -> AttemptOutcome:
    """
    Decide the outcome of one verify attempt.

    A match verifies and resets the counter. A mismatch counts; the
    MAX_OTP_ATTEMPTS-th mismatch locks the invite for LOCKOUT_DURATION.
    """
    if code_matches:
        return AttemptOutcome(verified=True, attempts=0)

    attempts = invite.otp_attempts + 1
    if attempts >= MAX_OTP_ATTEMPTS:
        return AttemptOutcome(
            attempts=attempts,
            remaining_attempts=0,
            locked=True,
            locked_until=now + LOCKOUT_DURATION,
        )
    return AttemptOutcome(
        attempts=attempts, remaining_attempts=MAX_OTP_ATTEMPTS - attempts
    )


def is_expired(invite: Invite, now: datetime) -> bool:
    return invite.status == InviteStatus.expired or invite.expires_at <= now


def is_used(invite: Invite) -> bool:
    return invite.used_at is not None or invite.status == InviteStatus.accepted


def effective_status(invite: Invite, now: datetime) -> InviteStatus:
    """Exactly one of PENDING / ACCEPTED / EXPIRED; acceptance wins"""
    if is_used(invite):
        return InviteStatus.accepted
    if is_expired(invite, now):
        return InviteStatus.expired
    return InviteStatus.pending


def is_password_acceptable(password: Optional[str]) -> bool:
    return password is not None and len(password) >= MIN_PASSWORD_LENGTH
