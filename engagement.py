"""
Shared pieces of the engagement items (posts and mind wall issues): comments,
anonymous display and the public view of a stored item.
"""

import os
import uuid
from typing import Optional

from auth import Actor
from database import get_document, now_utc, to_public, update_document
from errors import NotFound, ValidationFailed
from schemas import Comment

ANONYMOUS_DISPLAY_NAME = os.getenv("ANONYMOUS_DISPLAY_NAME", "Anonymous")


def require_text(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationFailed(f"{field} is required")
    return value


def new_comment_id() -> str:
    # time-based; the store has no id generator for array elements
    return uuid.uuid1().hex


def append_comment(collection: str, item_id: str, actor: Actor, text: str, as_anonymous: bool = False) -> dict:
    """Append a comment to an item's comment list and return it.

    Anonymous comments show a fixed label but still record the author id.
    """
    text = require_text(text, "Comment")
    comment = Comment(
        id=new_comment_id(),
        author_id=actor.id,
        author_display_name=ANONYMOUS_DISPLAY_NAME if as_anonymous else actor.display_name,
        text=text,
        is_anonymous=as_anonymous,
        created_at=now_utc(),
    )
    if not update_document(collection, item_id, {"$push": {"comments": comment.model_dump()}}):
        raise NotFound()
    return comment.model_dump()


def public_item(doc: dict, viewer: Optional[Actor]) -> dict:
    """Public view of an engagement item.

    Moderators see who wrote anonymous content; everyone else only learns
    whether it is their own.
    """
    item = to_public(doc)
    if viewer is not None and viewer.is_moderator:
        return item
    viewer_id = viewer.id if viewer else None
    if item.get("is_anonymous"):
        item["is_own"] = item.get("author_id") == viewer_id
        item.pop("author_id", None)
    comments = []
    for c in item.get("comments", []):
        if c.get("is_anonymous"):
            c = {**c, "is_own": c.get("author_id") == viewer_id}
            c.pop("author_id", None)
        comments.append(c)
    if "comments" in item:
        item["comments"] = comments
    return item


def load_item(collection: str, item_id: str) -> dict:
    doc = get_document(collection, item_id)
    if doc is None:
        raise NotFound()
    return doc
