"""
Tenant Entity

A garage: the isolated customer organization that owns invites and members.
"""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Relationship, SQLModel

from garage_iam.domain.base import utc_now

if TYPE_CHECKING:
    from .membership import Membership


class Tenant(SQLModel, table=True):
    """Tenant entity - one garage."""

    __tablename__ = "tenants"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    memberships: list["Membership"] = Relationship(back_populates="tenant")
