from app.core.database import Base
from .gyms import Gym
from .members import Member
from .plans import Plan
from .memberships import Membership
from .classes import ClassTemplate
from app.desk.schemas.memberships import MembershipStatus

__all__ = [
    "Base",
    "Gym",
    "Member",
    "Plan",
    "Membership",
    "MembershipStatus",
    "ClassTemplate",
]
