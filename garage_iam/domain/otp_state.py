"""
OTP sub-state

The invite stores OTP and lockout state as flat nullable columns. This
module reads them into one explicit variant so callers branch on a
single value instead of re-deriving it from field combinations.
"""

from datetime import datetime
from typing import Literal, Union

from pydantic import BaseModel

from garage_iam.domain.entities import Invite

from .invite_policy import is_locked


class NoCodeIssued(BaseModel):
    kind: Literal["no_code"] = "no_code"


class CodeIssued(BaseModel):
    kind: Literal["issued"] = "issued"
    expires_at: datetime
    attempts: int


class CodeExpired(BaseModel):
    kind: Literal["expired"] = "expired"
    expired_at: datetime


class Locked(BaseModel):
    kind: Literal["locked"] = "locked"
    until: datetime


OtpState = Union[NoCodeIssued, CodeIssued, CodeExpired, Locked]


def otp_state_of(invite: Invite, now: datetime) -> OtpState:
    """Lock wins over everything else, then code presence, then code expiry"""
    if is_locked(invite, now):
        return Locked(until=invite.locked_until)
    if invite.otp_hash is None:
        return NoCodeIssued()
    # otp_hash without an expiry is treated as already expired
    if invite.otp_expires_at is None or invite.otp_expires_at <= now:
        return CodeExpired(expired_at=invite.otp_expires_at or now)
    return CodeIssued(expires_at=invite.otp_expires_at, attempts=invite.otp_attempts)
