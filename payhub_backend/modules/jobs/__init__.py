"""Jobs module for PayHub."""

from .models import Job
from .routers import router

__all__ = [
    # Models
    "Job",
    # Routers
    "router",
]
