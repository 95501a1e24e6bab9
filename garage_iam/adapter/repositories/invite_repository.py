from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm.exc import StaleDataError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from garage_iam.app.repositories.errors import ConcurrentUpdateError
from garage_iam.app.repositories.invite_repository import IInviteRepository
from garage_iam.domain.entities import Invite, InviteStatus


class InviteRepository(IInviteRepository):
    """Invite repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, invite_id: UUID) -> Optional[Invite]:
        """Get invite by ID"""
        stmt = select(Invite).where(Invite.id == invite_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_token_hash(self, token_hash: str) -> Optional[Invite]:
        """Get invite by token digest"""
        stmt = select(Invite).where(Invite.token_hash == token_hash)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_active_pending(
        self, tenant_id: UUID, email: str, now: datetime
    ) -> Optional[Invite]:
        """Get pending, unexpired invite by tenant and email"""
        stmt = (
            select(Invite)
            .where(
                Invite.tenant_id == tenant_id,
                Invite.email == email,
                Invite.status == InviteStatus.pending,
                Invite.used_at.is_(None),
                Invite.expires_at > now,
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_tenant(self, tenant_id: UUID) -> List[Invite]:
        """Get all invites for a tenant, newest first"""
        stmt = (
            select(Invite)
            .where(Invite.tenant_id == tenant_id)
            .order_by(Invite.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, invite: Invite) -> Invite:
        """Create a new invite"""
        self.session.add(invite)
        await self.session.flush()
        await self.session.refresh(invite)
        return invite

    async def update(self, invite: Invite) -> Invite:
        """Update existing invite; the UPDATE is guarded by the version column"""
        invite_id = invite.id
        self.session.add(invite)
        try:
            await self.session.flush()
        except StaleDataError as e:
            raise ConcurrentUpdateError(f"Invite {invite_id} was modified concurrently") from e
        await self.session.refresh(invite)
        return invite

    async def delete(self, invite: Invite) -> None:
        """Delete an invite"""
        await self.session.delete(invite)
        await self.session.flush()
