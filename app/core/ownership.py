"""
Ownership checks for user-owned rows.

Another user's row is reported exactly like a missing one so ids cannot be
probed.
"""
from typing import Optional, TypeVar

from fastapi import Depends, HTTPException, status

from app.core.auth_dependency import get_current_user
from app.core.tiers import Tier
from app.db.models.user import User

T = TypeVar("T")


def is_admin(user: User) -> bool:
    return (user.role or "").lower() == Tier.ADMIN.value


def ensure_owner(resource: Optional[T], user_id: int, detail: str = "Not found") -> T:
    """Return `resource` if it belongs to `user_id`, else raise 404."""
    if resource is None or getattr(resource, "user_id", None) != user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    return resource


def ensure_owner_or_admin(resource: Optional[T], user: User, detail: str = "Not found") -> T:
    if resource is not None and is_admin(user):
        return resource
    return ensure_owner(resource, user.id, detail)


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Dependency: the current user, who must be an administrator."""
    if not is_admin(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user
