"""
Garage IAM Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

from .enums import (
    InviteStatus,
    MembershipRole,
    MembershipStatus,
)

from .tenant import Tenant
from .user import User
from .membership import Membership
from .invite import Invite

__all__ = [
    # Enums
    "InviteStatus",
    "MembershipRole",
    "MembershipStatus",
    # Entities
    "Tenant",
    "User",
    "Membership",
    "Invite",
]
