"""Portal Routers Package"""
from .classes import router as classes_router
from .checkin import router as checkin_router
from .memberships import router as memberships_router

__all__ = [
    "classes_router",
    "checkin_router",
    "memberships_router",
]
