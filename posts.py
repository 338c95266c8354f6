"""
Posts: activities, concerns and general messages on the social feed.
"""

import logging
from typing import List, Optional

from auth import Actor
from database import create_document, delete_document, get_documents
from engagement import ANONYMOUS_DISPLAY_NAME, append_comment, load_item, public_item, require_text
from errors import NotFound, RateLimited, ValidationFailed
from moderation import require_delete, require_moderator
from schemas import Post, PostCreate
from votes import apply_vote, debouncer

logger = logging.getLogger(__name__)

COLLECTION = "post"
POST_VOTES = ("up", "down", "support")


def create_post(actor: Actor, payload: PostCreate) -> dict:
    category = require_text(payload.category, "Category")
    content = payload.content.strip()
    anonymous = payload.kind == "concern" and payload.is_anonymous

    # activity-only fields are dropped for other kinds
    activity_fields = {}
    if payload.kind == "activity":
        activity_fields = dict(
            location=payload.location,
            scheduled_date=payload.scheduled_date.isoformat() if payload.scheduled_date else None,
            scheduled_time=payload.scheduled_time.isoformat() if payload.scheduled_time else None,
            max_participants=payload.max_participants,
        )
    elif not content:
        raise ValidationFailed("Content is required")

    post = Post(
        kind=payload.kind,
        author_id=actor.id,
        author_name=ANONYMOUS_DISPLAY_NAME if anonymous else actor.display_name,
        content=content,
        category=category,
        visibility=payload.visibility,
        is_anonymous=anonymous,
        status="new" if payload.kind == "concern" else None,
        **activity_fields,
    )

    post_id = create_document(COLLECTION, post)
    return public_item(load_item(COLLECTION, post_id), actor)


def get_post(post_id: str, viewer: Optional[Actor] = None) -> dict:
    return public_item(load_item(COLLECTION, post_id), viewer)


def list_posts(viewer: Optional[Actor] = None, kind: Optional[str] = None) -> List[dict]:
    """Newest first. Moderators-only posts are hidden from regular viewers."""
    filter_dict = {"kind": kind} if kind else {}
    docs = get_documents(COLLECTION, filter_dict, sort=[("created_at", -1)])
    show_hidden = viewer is not None and viewer.is_moderator
    return [
        public_item(d, viewer)
        for d in docs
        if show_hidden or d.get("visibility", "public") == "public"
    ]


def vote_post(actor: Actor, post_id: str, direction: str) -> bool:
    if direction not in POST_VOTES:
        raise ValidationFailed(f"Unsupported vote direction: {direction}")
    if not debouncer.allow(post_id):
        raise RateLimited()
    return apply_vote(COLLECTION, post_id, actor.id, direction, POST_VOTES)


def vote_up(actor: Actor, post_id: str) -> bool:
    return vote_post(actor, post_id, "up")


def vote_down(actor: Actor, post_id: str) -> bool:
    return vote_post(actor, post_id, "down")


def toggle_support(actor: Actor, post_id: str) -> bool:
    return vote_post(actor, post_id, "support")


def add_comment(actor: Actor, post_id: str, text: str, as_anonymous: bool = False) -> dict:
    return append_comment(COLLECTION, post_id, actor, text, as_anonymous)


def delete_post(actor: Actor, post_id: str) -> None:
    post = load_item(COLLECTION, post_id)
    actor = require_delete(actor, post)
    if not delete_document(COLLECTION, post_id):
        raise NotFound()
    if actor.id != post.get("author_id"):
        logger.info("Post %s deleted by %s %s", post_id, actor.role, actor.id)


def delete_post_as_moderator(actor: Actor, post_id: str) -> None:
    actor = require_moderator(actor)
    if not delete_document(COLLECTION, post_id):
        raise NotFound()
    logger.info("Post %s deleted by %s %s", post_id, actor.role, actor.id)
