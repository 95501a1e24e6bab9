from sqlmodel.ext.asyncio.session import AsyncSession

from garage_iam.adapter.repositories.invite_repository import InviteRepository
from garage_iam.adapter.repositories.membership_repository import MembershipRepository
from garage_iam.adapter.repositories.tenant_repository import TenantRepository
from garage_iam.adapter.repositories.user_repository import UserRepository
from garage_iam.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.invites = InviteRepository(self.session)
        self.tenants = TenantRepository(self.session)
        self.users = UserRepository(self.session)
        self.memberships = MembershipRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
