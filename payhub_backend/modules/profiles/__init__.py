"""Contractor profiles module for PayHub."""

from .models import FundingSource, Profile
from .routers import router

__all__ = [
    # Models
    "Profile",
    "FundingSource",
    # Routers
    "router",
]
