"""Tenant onboarding module for PayHub."""

from .models import BeneficialOwner, Tenant, TenantCompany
from .routers import owners_router, router

__all__ = [
    # Models
    "Tenant",
    "TenantCompany",
    "BeneficialOwner",
    # Routers
    "router",
    "owners_router",
]
