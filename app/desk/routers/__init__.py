"""Front Desk Routers Package"""
from .memberships import router as memberships_router
from .classes import router as classes_router

__all__ = [
    "memberships_router",
    "classes_router",
]
