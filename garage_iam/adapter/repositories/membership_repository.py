from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from garage_iam.app.repositories.errors import DuplicateRecordError
from garage_iam.app.repositories.membership_repository import IMembershipRepository
from garage_iam.domain.entities import Membership


class MembershipRepository(IMembershipRepository):
    """Membership repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_and_tenant(
        self, user_id: UUID, tenant_id: UUID
    ) -> Optional[Membership]:
        """Get membership by user and tenant"""
        stmt = select(Membership).where(
            Membership.user_id == user_id, Membership.tenant_id == tenant_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, membership: Membership) -> Membership:
        """Create a new membership; (tenant_id, user_id) is unique"""
        user_id, tenant_id = membership.user_id, membership.tenant_id
        self.session.add(membership)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise DuplicateRecordError(
                f"Membership for user {user_id} in tenant "
                f"{tenant_id} already exists"
            ) from e
        await self.session.refresh(membership)
        return membership
