"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .jwt_service import decode_access_token
from .schemas import AuthenticatedUser, RoleSlug

security = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> AuthenticatedUser:
    """Extract the caller from the bearer token.

    No database call is made; the tenant and role come from the token claims.
    """
    payload = decode_access_token(credentials.credentials)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return AuthenticatedUser(
            id=int(payload["sub"]),
            tenant_id=int(payload["tenant_id"]),
            email=payload["email"],
            role_slug=payload["role"],
        )
    except (KeyError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token payload: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_role(*allowed_roles: str | RoleSlug):
    """Dependency factory for role-based access control.

    Usage:
        @router.get("/company")
        async def read_company(
            current_user: AuthenticatedUser = Depends(
                require_role(RoleSlug.ADMIN, RoleSlug.ADMIN_READER)
            )
        ):
            ...
    """
    role_slugs = {r.value if isinstance(r, RoleSlug) else r for r in allowed_roles}

    async def role_checker(
        current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    ) -> AuthenticatedUser:
        if current_user.role_slug not in role_slugs:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=(
                    f"Access denied. Required roles: {', '.join(sorted(role_slugs))}"
                ),
            )
        return current_user

    return role_checker


# Type aliases for dependency injection
AdminUser = Annotated[AuthenticatedUser, Depends(require_role(RoleSlug.ADMIN))]
AdminReaderUser = Annotated[
    AuthenticatedUser, Depends(require_role(RoleSlug.ADMIN, RoleSlug.ADMIN_READER))
]
