from enum import Enum
from typing import Optional

from pydantic import BaseModel


class UserRole(str, Enum):
    ADMIN = "admin"
    KASIR = "kasir"
    ADMIN1 = "admin1"
    DEMO = "demo"
    USER = "user"


class Identity(BaseModel):
    """Session identity handed over by the external auth provider"""

    username: str
    role: UserRole
    display_name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.display_name or self.username
