"""
Use Cases

Organized into domain folders:
- auth/: Session lifecycle, join and login

Import from subdirectories for better organization.
"""

from .auth import (
    SessionAuthority,
    JoinUseCase,
    JoinCommand,
    LoginUseCase,
)

__all__ = [
    "SessionAuthority",
    "JoinUseCase",
    "JoinCommand",
    "LoginUseCase",
]
