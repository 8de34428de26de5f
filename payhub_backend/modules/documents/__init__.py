"""Verification documents module for PayHub."""

from .models import Document, DocumentOwnerType
from .routers import router

__all__ = [
    # Models
    "Document",
    "DocumentOwnerType",
    # Routers
    "router",
]
