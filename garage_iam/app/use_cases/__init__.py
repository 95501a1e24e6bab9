"""
Use Cases

Organized by area:
- invites/: Invite lifecycle and OTP email verification
"""

from .invites import (
    AcceptInviteUseCase,
    CreateInviteUseCase,
    GetInviteUseCase,
    ListInvitesUseCase,
    PreviewInviteUseCase,
    ResendInviteUseCase,
    RevokeInviteUseCase,
    SendInviteCodeUseCase,
    VerifyInviteCodeUseCase,
)

__all__ = [
    "CreateInviteUseCase",
    "PreviewInviteUseCase",
    "SendInviteCodeUseCase",
    "VerifyInviteCodeUseCase",
    "AcceptInviteUseCase",
    "ResendInviteUseCase",
    "RevokeInviteUseCase",
    "ListInvitesUseCase",
    "GetInviteUseCase",
]
