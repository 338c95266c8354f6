"""
Role tiers and the moderator grant log.

A user holds exactly one role tier. Moderator grants are also written to an
append-only log; revoking flips the log entry inactive and drops the user
back to `user`.
"""

import logging
from typing import List

from auth import Actor, display_name_for
from database import create_document, get_document, get_documents, now_utc, to_public, update_document, update_documents
from errors import NotFound, ValidationFailed
from moderation import require_admin
from schemas import ModeratorGrant

logger = logging.getLogger(__name__)

GRANTS = "moderatorgrant"


def get_user_role(user_id: str) -> str:
    user = get_document("user", user_id)
    if user is None:
        raise NotFound("User not found")
    return user.get("role", "user")


def add_moderator(actor: Actor, user_id: str) -> dict:
    actor = require_admin(actor)
    user = get_document("user", user_id)
    if user is None:
        raise NotFound("User not found")
    if user.get("role") == "admin":
        raise ValidationFailed("Admins already have moderator rights")
    if user.get("role") == "moderator":
        raise ValidationFailed("User is already a moderator")

    update_document("user", user_id, {"$set": {"role": "moderator", "department": None}})
    grant = ModeratorGrant(
        user_id=user_id,
        name=display_name_for(user),
        email=user.get("email", ""),
        added_by=actor.id,
        added_at=now_utc(),
    )
    grant_id = create_document(GRANTS, grant)
    logger.info("Moderator role granted to %s by %s", user_id, actor.id)
    return to_public(get_document(GRANTS, grant_id))


def remove_moderator(actor: Actor, user_id: str) -> int:
    """Revoke moderator rights. Returns how many active grants were closed."""
    actor = require_admin(actor)
    user = get_document("user", user_id)
    if user is None:
        raise NotFound("User not found")
    if user.get("role") != "moderator":
        raise ValidationFailed("User is not a moderator")

    update_document("user", user_id, {"$set": {"role": "user"}})
    closed = update_documents(
        GRANTS,
        {"user_id": user_id, "is_active": True},
        {"$set": {"is_active": False, "revoked_by": actor.id}},
    )
    logger.info("Moderator role revoked from %s by %s", user_id, actor.id)
    return closed


def list_moderators() -> List[dict]:
    return [to_public(g) for g in get_documents(GRANTS, {"is_active": True}, sort=[("added_at", -1)])]
