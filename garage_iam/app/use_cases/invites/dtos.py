"""
Invite Use Case DTOs (Data Transfer Objects)

Command and Response classes for the invite flow.
Commands are built by the API layer after request validation passes;
responses carry everything the presentation layer renders.
"""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


# ============================================================================
# Commands
# ============================================================================


class CreateInviteCommand(BaseModel):
    """Invite someone to a garage"""

    tenant_id: UUID
    inviter_id: UUID
    email: str
    role: str


class AcceptInviteCommand(BaseModel):
    """
    Accept an invite after email verification.

    Email and role always come from the invite, never from the request.
    """

    verification_token: Optional[str] = None
    name: Optional[str] = None
    password: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class InviteCreatedResponse(BaseModel):
    """Response for create invite use case"""

    invite_id: str
    email: str
    role: str
    status: str
    expires_at: str
    invite_link: str
    email_sent: bool


class InvitePreviewResponse(BaseModel):
    """Public, read-only view of an invite (email is masked)"""

    garage_name: str
    role: str
    email: str
    status: str
    expires_at: str
    otp_sent: bool
    is_locked: bool


class SendCodeResponse(BaseModel):
    """Response for send verification code use case"""

    message: str
    expires_at: str
    remaining_sends: int


class VerifyCodeResponse(BaseModel):
    """Response for verify code use case (raw token shown exactly once)"""

    message: str
    verification_token: str
    expires_at: str


class AcceptInviteResponse(BaseModel):
    """Response for accept invite use case"""

    message: str
    user_id: str
    name: str
    email: str
    tenant_id: str
    tenant_name: str
    role: str
    is_new_user: bool
    already_member: bool
    access_token: str


class ResendInviteResponse(BaseModel):
    """Response for resend invite use case"""

    status: str
    expires_at: str
    invite_link: str
    email_sent: bool


class RevokeInviteResponse(BaseModel):
    """Response for revoke invite use case"""

    status: str


class InviteSummary(BaseModel):
    """One row of the tenant's invite list (no tokens or hashes)"""

    id: str
    email: str
    role: str
    status: str
    expires_at: str
    is_expired: bool
    is_locked: bool
    otp_sent: bool
    otp_send_count: int
    otp_attempts: int
    created_by_user_id: str
    created_at: str


class InviteCreator(BaseModel):
    name: str
    email: str


class InviteDetailResponse(InviteSummary):
    """Single invite for owners/managers, with lock and usage timestamps"""

    used_at: Optional[str] = None
    locked_until: Optional[str] = None
    otp_last_sent_at: Optional[str] = None
    created_by: Optional[InviteCreator] = None


class ListInvitesResponse(BaseModel):
    """Response for list invites use case"""

    invites: List[InviteSummary]
