"""Front Desk CRUD Package"""
from .memberships import (
    freeze_membership,
    unfreeze_membership,
    sync_expired_memberships,
    get_expiring_memberships,
    get_member_current_membership,
)

__all__ = [
    "freeze_membership",
    "unfreeze_membership",
    "sync_expired_memberships",
    "get_expiring_memberships",
    "get_member_current_membership",
]
