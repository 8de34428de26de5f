"""Authentication schemas for PayHub."""

import enum

from pydantic import BaseModel


class RoleSlug(str, enum.Enum):
    """Capability roles carried in the access token."""

    ADMIN = "admin"
    ADMIN_READER = "admin_reader"
    CONTRACTOR = "contractor"


class AuthenticatedUser(BaseModel):
    """Authenticated user context for request handling."""

    id: int
    tenant_id: int
    email: str
    role_slug: str

    class Config:
        from_attributes = True
