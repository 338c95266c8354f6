"""
Join/leave for activity posts, with an optional participant cap.
"""

import logging

from auth import Actor
from database import get_document, now_utc, update_document
from errors import ActivityFull, AlreadyJoined, NotAnActivity, NotFound
from posts import COLLECTION
from schemas import Participant

logger = logging.getLogger(__name__)


def _check_can_join(activity: dict, uid: str) -> None:
    if activity is None:
        raise NotFound("Activity not found")
    if activity.get("kind") != "activity":
        raise NotAnActivity()
    participants = activity.get("participants", [])
    if any(p.get("uid") == uid for p in participants):
        raise AlreadyJoined()
    cap = activity.get("max_participants")
    if cap and len(participants) >= cap:
        raise ActivityFull()


def join_activity(actor: Actor, activity_id: str) -> dict:
    """Add the actor to an activity's participants.

    The capacity and duplicate checks are repeated inside the write filter:
    the slot at index max_participants - 1 must still be empty and the uid
    must still be absent. When that filter misses, the document is re-read
    to report why.
    """
    activity = get_document(COLLECTION, activity_id)
    _check_can_join(activity, actor.id)

    participant = Participant(uid=actor.id, display_name=actor.display_name, joined_at=now_utc())
    conditions = {"kind": "activity", "participants.uid": {"$ne": actor.id}}
    cap = activity.get("max_participants")
    if cap:
        conditions["max_participants"] = cap
        conditions[f"participants.{cap - 1}"] = {"$exists": False}

    if update_document(COLLECTION, activity_id, {"$push": {"participants": participant.model_dump()}}, conditions):
        return participant.model_dump()

    logger.debug("Join on activity %s missed its write filter, re-checking", activity_id)
    _check_can_join(get_document(COLLECTION, activity_id), actor.id)
    # the cap changed between the read and the write; the caller may retry
    raise ActivityFull()


def leave_activity(actor: Actor, activity_id: str) -> bool:
    """Remove the actor from an activity. Returns False if they were not in it."""
    activity = get_document(COLLECTION, activity_id)
    if activity is None:
        raise NotFound("Activity not found")
    if not any(p.get("uid") == actor.id for p in activity.get("participants", [])):
        return False
    update_document(COLLECTION, activity_id, {"$pull": {"participants": {"uid": actor.id}}})
    return True
