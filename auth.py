"""
Identity and role resolution.

Sign-in lives outside this service; callers identify themselves with the
X-User-Id header and the role tier is read from the `user` collection once
per request. Privileged checks call refresh_actor() to revalidate the role
before acting.
"""

from typing import Optional

from fastapi import Header
from pydantic import BaseModel

from database import get_document
from errors import NotAuthenticated
from schemas import Role


class Actor(BaseModel):
    id: str
    display_name: str
    email: Optional[str] = None
    role: Role = "user"
    department: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_moderator(self) -> bool:
        return self.role in ("moderator", "admin")

    @property
    def is_department_head(self) -> bool:
        return self.role == "department_head"


def display_name_for(user: dict) -> str:
    if user.get("name"):
        return user["name"]
    email = user.get("email")
    if not email:
        return "Unknown User"
    return email.split("@")[0]


def resolve_actor(user_id: Optional[str]) -> Actor:
    if not user_id:
        raise NotAuthenticated()
    user = get_document("user", user_id)
    if not user:
        raise NotAuthenticated("Unknown user")
    return Actor(
        id=str(user["_id"]),
        display_name=display_name_for(user),
        email=user.get("email"),
        role=user.get("role", "user"),
        department=user.get("department"),
    )


def refresh_actor(actor: Actor) -> Actor:
    return resolve_actor(actor.id)


def current_actor(x_user_id: Optional[str] = Header(None)) -> Actor:
    return resolve_actor(x_user_id)
