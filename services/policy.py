# services/policy.py
"""Role and ownership rules shared by every router and service."""
from typing import Any

from models.user import RoleEnum

PRIVILEGED_ROLES = (RoleEnum.admin.value, RoleEnum.instructor.value)


def _role(user: Any) -> str:
    role = getattr(user, "role", None)
    return role.value if isinstance(role, RoleEnum) else str(role)


def is_admin(user: Any) -> bool:
    return _role(user) == RoleEnum.admin.value


def can_enroll_without_payment(role: Any) -> bool:
    """Instructors and admins enroll directly; students go through checkout."""
    role = role.value if isinstance(role, RoleEnum) else str(role)
    return role in PRIVILEGED_ROLES


def can_author_courses(user: Any) -> bool:
    return _role(user) in PRIVILEGED_ROLES


def is_owner_or_admin(user: Any, resource: Any, owner_field: str = "instructor_id") -> bool:
    if is_admin(user):
        return True
    owner = resource.get(owner_field) if isinstance(resource, dict) else getattr(resource, owner_field, None)
    return owner is not None and str(owner) == str(getattr(user, "id", None))
