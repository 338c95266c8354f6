"""
Authorization gate for deletes and complaint triage.

The gate only answers yes/no and raises Forbidden; it never writes.
"""

import logging

from auth import Actor, refresh_actor
from errors import Forbidden

logger = logging.getLogger(__name__)


def can_delete(actor: Actor, item: dict) -> bool:
    return actor.id == item.get("author_id") or actor.is_moderator


def can_triage(actor: Actor, complaint: dict) -> bool:
    if actor.is_admin:
        return True
    return (
        actor.is_department_head
        and actor.department is not None
        and actor.department == complaint.get("department")
    )


def require_delete(actor: Actor, item: dict) -> Actor:
    if actor.id == item.get("author_id"):
        return actor
    actor = refresh_actor(actor)
    if not can_delete(actor, item):
        raise Forbidden("You can only delete your own posts")
    return actor


def require_moderator(actor: Actor) -> Actor:
    actor = refresh_actor(actor)
    if not actor.is_moderator:
        raise Forbidden("Only moderators and admins can do that")
    return actor


def require_admin(actor: Actor) -> Actor:
    actor = refresh_actor(actor)
    if not actor.is_admin:
        raise Forbidden("Only admins can do that")
    return actor


def require_triage(actor: Actor, complaint: dict) -> Actor:
    actor = refresh_actor(actor)
    if not can_triage(actor, complaint):
        logger.info("Triage denied for %s (%s) on complaint %s", actor.id, actor.role, complaint.get("_id"))
        raise Forbidden("You can only manage complaints for your own department")
    return actor
