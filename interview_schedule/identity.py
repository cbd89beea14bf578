# interview_schedule/identity.py
"""
Acting identity.

Authentication happens upstream (identity provider / gateway). By the time
a request reaches this service the caller is one of:
- a staff user, passed on as X-User-Id / X-User-Role headers
- the owner themselves, proven by holding the owner's schedule token
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from .errors import UnauthorizedError, ValidationError

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Actor:
    user_id: Optional[int] = None
    role: Optional[str] = None
    owner_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    def can_manage(self, owner) -> bool:
        """Whether this actor may act on `owner`'s schedule."""
        if self.is_admin:
            return True
        if self.owner_id is not None and self.owner_id == owner.id:
            return True
        return self.user_id is not None and owner.managed_by == self.user_id

    @classmethod
    def for_owner(cls, owner) -> "Actor":
        return cls(owner_id=owner.id)


def get_actor(request: Request) -> Optional[Actor]:
    """Staff identity forwarded by the upstream identity provider, if any."""
    raw_id = request.headers.get("X-User-Id")
    if not raw_id:
        return None
    try:
        user_id = int(raw_id)
    except ValueError:
        raise ValidationError("X-User-Id must be an integer") from None
    role = request.headers.get("X-User-Role") or None
    return Actor(user_id=user_id, role=role)


def require_actor(request: Request) -> Actor:
    actor = get_actor(request)
    if actor is None:
        raise UnauthorizedError()
    return actor
