"""
Invite Entity

One invitation's full lifecycle: token, expiry, OTP, lockout and
verification sub-state all live on the same record.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, Integer, SQLModel

from garage_iam.domain.base import utc_now

from .enums import InviteStatus, MembershipRole

# Optimistic concurrency: every UPDATE is issued with WHERE version = <loaded>
_version_column = Column("version", Integer, nullable=False)


class Invite(SQLModel, table=True):
    """
    Invite entity - a single-use, time-bounded offer to join a garage.

    Business Rules:
    - Created by an owner/manager, expires after 7 days
    - Only the SHA-256 hash of the invite token is stored
    - Email ownership is proven with a 6-digit code (10 minutes, 5 attempts)
    - 5 wrong codes lock the invite for 1 hour
    - At most 5 codes per rolling hour
    - Acceptance requires the verification token minted by a correct code
    - OTP/lockout fields are only changed by the invite state machine
    """

    __tablename__ = "invites"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    created_by_user_id: UUID = Field(foreign_key="users.id", nullable=False)
    email: str = Field(max_length=255, nullable=False, index=True)
    role: MembershipRole = Field(nullable=False)

    token_hash: str = Field(unique=True, index=True, max_length=64)  # SHA-256 hex
    status: InviteStatus = Field(default=InviteStatus.pending)
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # OTP sub-state
    otp_hash: Optional[str] = Field(default=None, max_length=64)
    otp_expires_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    otp_attempts: int = Field(default=0)
    otp_send_count: int = Field(default=0)
    otp_last_sent_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Lockout sub-state
    locked_until: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Verification sub-state (hash of the token returned by a correct code)
    verification_token: Optional[str] = Field(default=None, max_length=64)
    verification_token_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    version: int = Field(default=1, sa_column=_version_column)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime, onupdate=utc_now)
    )

    __mapper_args__ = {"version_id_col": _version_column}

    __table_args__ = (
        Index("idx_invite_tenant_email_status", "tenant_id", "email", "status"),
        Index("idx_invite_expires_at", "expires_at"),
    )
