"""
Discussion Board Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class AccountStatus(str, Enum):
    """User account status"""

    active = "active"
    pending = "pending"
    suspended = "suspended"
    banned = "banned"


class MemberStatus(str, Enum):
    """Member profile status"""

    active = "active"
    suspended = "suspended"


class AdministratorStatus(str, Enum):
    """Administrator privilege status"""

    active = "active"
    suspended = "suspended"


class SessionRole(str, Enum):
    """Role a session was issued for, carried in the role token claim"""

    member = "member"
    administrator = "administrator"
