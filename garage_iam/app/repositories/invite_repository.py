from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from garage_iam.domain.entities import Invite


class IInviteRepository(ABC):
    """Invite repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, invite_id: UUID) -> Optional[Invite]:
        """Get invite by ID"""
        pass

    @abstractmethod
    async def get_by_token_hash(self, token_hash: str) -> Optional[Invite]:
        """Get invite by the digest of its bearer token"""
        pass

    @abstractmethod
    async def get_active_pending(
        self, tenant_id: UUID, email: str, now: datetime
    ) -> Optional[Invite]:
        """Get a PENDING, not yet expired invite for tenant and email"""
        pass

    @abstractmethod
    async def list_by_tenant(self, tenant_id: UUID) -> List[Invite]:
        """Get a tenant's invites, newest first"""
        pass

    @abstractmethod
    async def create(self, invite: Invite) -> Invite:
        """Create a new invite"""
        pass

    @abstractmethod
    async def update(self, invite: Invite) -> Invite:
        """
        Persist changes with an optimistic version check.

        Raises:
            ConcurrentUpdateError: the invite changed since it was loaded
        """
        pass

    @abstractmethod
    async def delete(self, invite: Invite) -> None:
        """Delete an invite"""
        pass
