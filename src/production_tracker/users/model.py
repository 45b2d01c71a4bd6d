from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: the credential is stored in plain text, as the shared sheet expects.
    """

    user_id: str
    name: str
    username: str
    email: str
    role: Role
    category: Optional[str] = None
    password: str = ""
    avatar: Optional[str] = None
