from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from fastapi import Request

from ..models.user import Identity


class HeaderIdentityProvider:
    """Reads the session identity the upstream auth gateway forwards as headers.

    Authentication itself happens outside this service; requests reaching it
    carry the already-verified username and role.
    """

    USERNAME_HEADER = "X-Username"
    ROLE_HEADER = "X-Role"
    DISPLAY_NAME_HEADER = "X-Display-Name"

    def identify(self, request: Request) -> Optional[Identity]:
        username = request.headers.get(self.USERNAME_HEADER)
        role = request.headers.get(self.ROLE_HEADER)
        if not username or not role:
            return None
        try:
            return Identity(
                username=username,
                role=role.strip().lower(),
                display_name=request.headers.get(self.DISPLAY_NAME_HEADER),
            )
        except PydanticValidationError:
            return None
