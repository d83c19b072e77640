"""
Discussion Board Domain Entities

Each entity in its own file.
"""

# Export all enums
from .enums import AccountStatus, AdministratorStatus, MemberStatus, SessionRole

# Export all entities
from .user_account import UserAccount
from .member import Member
from .administrator import Administrator
from .session import Session
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "AccountStatus",
    "MemberStatus",
    "AdministratorStatus",
    "SessionRole",
    # Entities
    "UserAccount",
    "Member",
    "Administrator",
    "Session",
    "AuditEvent",
]
