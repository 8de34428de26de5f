"""Contractor payments module for PayHub."""

from .models import Transaction
from .routers import router

__all__ = [
    "Transaction",
    "router",
]
