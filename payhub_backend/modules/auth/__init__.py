"""Authentication gates for PayHub."""

from .dependencies import (
    AdminReaderUser,
    AdminUser,
    get_current_user,
    require_role,
)
from .jwt_service import create_access_token, decode_access_token
from .schemas import AuthenticatedUser, RoleSlug

__all__ = [
    "RoleSlug",
    # Dependencies
    "get_current_user",
    "require_role",
    "AdminUser",
    "AdminReaderUser",
    # Tokens
    "create_access_token",
    "decode_access_token",
    # Schemas
    "AuthenticatedUser",
]
