"""User reference supplied by the identity collaborator.

The ledger never authenticates anyone; it only stores this record so
analyses can be attributed to a requesting user.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import UserRole


@dataclass
class User:
    username: Optional[str] = None
    email: Optional[str] = None
    password_hash: Optional[str] = None
    role: Optional[UserRole] = UserRole.DEVELOPER
    is_active: bool = True
    id: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: Optional[int] = None
