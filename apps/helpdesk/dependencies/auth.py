from collections.abc import Callable
from enum import Enum
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer


class Role(str, Enum):
    """Supported roles."""

    ADMIN = "admin"
    TECHNICIAN = "technician"
    CLIENT = "client"


class User:
    """Authenticated actor handed to the ticket core."""

    def __init__(self, user_id: str, username: str, role: Role):
        self.id = user_id
        self.username = username
        self.role = role

    def has_role(self, *roles: Role) -> bool:
        return self.role in roles


TOKEN_USER_MAP: dict[str, tuple[str, str, Role]] = {
    "admin-token": ("7d1c2a9e-0000-4000-8000-000000000001", "admin", Role.ADMIN),
    "technician-token": ("7d1c2a9e-0000-4000-8000-000000000002", "technician", Role.TECHNICIAN),
    "client-token": ("7d1c2a9e-0000-4000-8000-000000000003", "client", Role.CLIENT),
}

bearer_scheme = HTTPBearer(auto_error=False)


def resolve_user_from_token(token: str) -> User:
    """Return the user associated with the provided bearer token.

    Stand-in for the external identity provider: tokens are looked up in a
    static table instead of being verified and decoded.
    """

    if token not in TOKEN_USER_MAP:
        raise HTTPException(status_code=401, detail="Invalid authentication credentials")

    user_id, username, role = TOKEN_USER_MAP[token]
    return User(user_id=user_id, username=username, role=role)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    request: Request,
) -> User:
    cached = getattr(request.state, "user", None)
    if isinstance(cached, User):
        return cached

    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = resolve_user_from_token(credentials.credentials)
    request.state.user = user
    return user


def roles_required(*roles: Role) -> Callable[[User], User]:
    """Dependency factory ensuring the current user holds one of the requested roles."""

    allowed = frozenset(roles)

    async def dependency(user: Annotated[User, Depends(get_current_user)]) -> User:
        if user.role not in allowed:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return dependency


CurrentUser = Annotated[User, Depends(get_current_user)]
