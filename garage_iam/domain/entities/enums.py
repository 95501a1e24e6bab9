"""
Garage IAM Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class MembershipRole(str, Enum):
    """Staff role within a garage"""

    owner = "OWNER"
    manager = "MANAGER"
    mechanic = "MECHANIC"
    storekeeper = "STOREKEEPER"
    viewer = "VIEWER"


class MembershipStatus(str, Enum):
    """Membership status"""

    active = "ACTIVE"
    invited = "INVITED"
    suspended = "SUSPENDED"


class InviteStatus(str, Enum):
    """Invite status (EXPIRED is usually derived from expires_at)"""

    pending = "PENDING"
    accepted = "ACCEPTED"
    expired = "EXPIRED"
