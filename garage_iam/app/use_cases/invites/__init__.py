"""
Invite Use Cases

Invite lifecycle: create, preview, verification code, accept, and the
owner/manager operations resend, revoke, list and view.
"""

from .accept_invite_use_case import AcceptInviteUseCase
from .create_invite_use_case import CreateInviteUseCase
from .dtos import (
    AcceptInviteCommand,
    AcceptInviteResponse,
    CreateInviteCommand,
    InviteCreatedResponse,
    InviteCreator,
    InviteDetailResponse,
    InvitePreviewResponse,
    InviteSummary,
    ListInvitesResponse,
    ResendInviteResponse,
    RevokeInviteResponse,
    SendCodeResponse,
    VerifyCodeResponse,
)
from .get_invite_use_case import GetInviteUseCase
from .list_invites_use_case import ListInvitesUseCase
from .preview_invite_use_case import PreviewInviteUseCase
from .resend_invite_use_case import ResendInviteUseCase
from .revoke_invite_use_case import RevokeInviteUseCase
from .send_invite_code_use_case import SendInviteCodeUseCase
from .verify_invite_code_use_case import VerifyInviteCodeUseCase

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
    "CreateInviteCommand",
    "AcceptInviteCommand",
    "InviteCreatedResponse",
    "InvitePreviewResponse",
    "SendCodeResponse",
    "VerifyCodeResponse",
    "AcceptInviteResponse",
    "ResendInviteResponse",
    "RevokeInviteResponse",
    "InviteSummary",
    "ListInvitesResponse",
    "InviteCreator",
    "InviteDetailResponse",
]
