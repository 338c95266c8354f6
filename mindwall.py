"""
Mind wall: a grievance board with single-direction support votes.

The wall is ordered by support, so the most-supported issues stay on top
regardless of age.
"""

import logging
from typing import List, Optional

from auth import Actor
from database import create_document, delete_document, get_documents
from engagement import append_comment, load_item, public_item, require_text
from errors import NotFound
from moderation import require_delete
from schemas import MindWallIssue, MindWallIssueCreate
from votes import apply_vote, debouncer

logger = logging.getLogger(__name__)

COLLECTION = "mindwallissue"


def create_issue(actor: Actor, payload: MindWallIssueCreate) -> dict:
    """Create an issue; the creator is counted as its first supporter."""
    issue = MindWallIssue(
        title=require_text(payload.title, "Title"),
        description=require_text(payload.description, "Description"),
        category=require_text(payload.category, "Category"),
        severity=payload.severity,
        author_id=actor.id,
        support_count=1,
        supported_by=[actor.id],
    )
    issue_id = create_document(COLLECTION, issue)
    return public_item(load_item(COLLECTION, issue_id), actor)


def list_issues(viewer: Optional[Actor] = None) -> List[dict]:
    docs = get_documents(COLLECTION, sort=[("support_count", -1), ("created_at", -1)])
    return [public_item(d, viewer) for d in docs]


def vote_issue(actor: Actor, issue_id: str) -> Optional[bool]:
    """Toggle the actor's support. Returns None when the vote was throttled."""
    if not debouncer.allow(issue_id):
        logger.debug("Dropped rapid repeat vote on issue %s", issue_id)
        return None
    return apply_vote(COLLECTION, issue_id, actor.id, "support")


def add_issue_comment(actor: Actor, issue_id: str, text: str, as_anonymous: bool = False) -> dict:
    return append_comment(COLLECTION, issue_id, actor, text, as_anonymous)


def delete_issue(actor: Actor, issue_id: str) -> None:
    issue = load_item(COLLECTION, issue_id)
    actor = require_delete(actor, issue)
    if not delete_document(COLLECTION, issue_id):
        raise NotFound()
    if actor.id != issue.get("author_id"):
        logger.info("Mind wall issue %s deleted by %s %s", issue_id, actor.role, actor.id)
