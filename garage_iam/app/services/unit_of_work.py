from abc import ABC, abstractmethod

from garage_iam.app.repositories.invite_repository import IInviteRepository
from garage_iam.app.repositories.membership_repository import IMembershipRepository
from garage_iam.app.repositories.tenant_repository import ITenantRepository
from garage_iam.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    invites: IInviteRepository
    tenants: ITenantRepository
    users: IUserRepository
    memberships: IMembershipRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
