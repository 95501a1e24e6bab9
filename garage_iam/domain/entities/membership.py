"""
Membership Entity

Links User to Tenant with a role.
"""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, Relationship, SQLModel

from garage_iam.domain.base import utc_now

from .enums import MembershipRole, MembershipStatus

if TYPE_CHECKING:
    from .tenant import Tenant
    from .user import User


class Membership(SQLModel, table=True):
    """
    Membership entity - links User to Tenant with a role.

    Business Rules:
    - One user can be member of multiple garages
    - (tenant_id, user_id) must be unique; the index is the final
      guard against two concurrent invite acceptances
    - Role always comes from the invite, never from the accept request
    """

    __tablename__ = "memberships"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)

    role: MembershipRole = Field(nullable=False)
    status: MembershipStatus = Field(default=MembershipStatus.active)

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    user: "User" = Relationship(back_populates="memberships")
    tenant: "Tenant" = Relationship(back_populates="memberships")

    __table_args__ = (
        Index("idx_membership_tenant_user", "tenant_id", "user_id", unique=True),
        Index("idx_membership_status", "status"),
    )
