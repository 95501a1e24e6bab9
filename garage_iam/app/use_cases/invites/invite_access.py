"""
Invite access helpers

Loading an invite from the bearer token (public flow) or by id within a
tenant (manager flow). Every expected failure is an Error, never raised.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from garage_iam.app.services.unit_of_work import UnitOfWork
from garage_iam.config import ApplicationConfig
from garage_iam.domain import invite_policy as policy
from garage_iam.domain import token_codec
from garage_iam.domain.entities import Invite, MembershipRole
from garage_iam.libs.result import Error, Result, Return

INVITE_MANAGER_ROLES = (MembershipRole.owner, MembershipRole.manager)


async def load_invite_by_raw_token(
    uow: UnitOfWork, raw_token: Optional[str], now: datetime
) -> Result[Invite]:
    """
    Resolve a raw invite token to a usable invite.

    Args:
        uow: Active unit of work
        raw_token: Token from the invite link
        now: Current time

    Returns:
        Result with the invite, or Error:
        - INVALID_TOKEN_FORMAT: too short, rejected before any lookup
        - INVALID_TOKEN: no invite with this token
        - INVITE_USED: already accepted
        - INVITE_EXPIRED: expires_at <= now
    """
    if not token_codec.is_well_formed_token(raw_token):
        return Return.err(Error("INVALID_TOKEN_FORMAT", "Invalid token format"))

    invite = await uow.invites.get_by_token_hash(token_codec.hash_secret(raw_token))
    if invite is None:
        return Return.err(Error("INVALID_TOKEN", "Invalid invite token"))

    if policy.is_used(invite):
        return Return.err(Error("INVITE_USED", "This invite has already been used"))

    if policy.is_expired(invite, now):
        return Return.err(Error("INVITE_EXPIRED", "This invite has expired"))

    return Return.ok(invite)


async def require_invite_manager(
    uow: UnitOfWork, user_id: UUID, tenant_id: UUID
) -> Optional[Error]:
    """Only owners and managers may create, list, resend or revoke invites"""
    membership = await uow.memberships.get_by_user_and_tenant(user_id, tenant_id)

    if membership is None:
        return Error("NOT_A_MEMBER", "You are not a member of this garage")

    if membership.role not in INVITE_MANAGER_ROLES:
        return Error(
            "INSUFFICIENT_ROLE", "Only owners and managers can manage invites"
        )

    return None


async def load_tenant_invite(
    uow: UnitOfWork, tenant_id: UUID, invite_id: UUID
) -> Result[Invite]:
    """Invite by id, hidden unless it belongs to the given tenant"""
    invite = await uow.invites.get_by_id(invite_id)

    if invite is None or invite.tenant_id != tenant_id:
        return Return.err(Error("INVITE_NOT_FOUND", "Invite not found"))

    return Return.ok(invite)


def concurrent_update_error() -> Error:
    return Error(
        "CONCURRENT_UPDATE",
        "This invite was modified by another request. Please try again.",
    )


def build_invite_link(raw_token: str) -> str:
    return f"{ApplicationConfig.APP_PUBLIC_URL.rstrip('/')}/invite/{raw_token}"
