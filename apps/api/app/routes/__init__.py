"""Route modules."""

from .events import router as events_router
from .users import router as users_router

__all__ = ["events_router", "users_router"]
