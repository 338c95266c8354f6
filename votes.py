"""
Vote ledger: per-user membership sets with denormalized counters.

Every item keeps `<ledger>_by` (a set of user ids) and `<ledger>_count` in the
same document. A vote reads the current membership, decides between
toggle-off, add and switch, then issues one conditional update whose filter
restates the membership it read. If another client got there first the
filter misses and the vote is re-read and retried, so the counter and the set
never drift apart.
"""

import logging
import os
import threading
import time
from typing import Callable, Dict, Iterable

from database import get_document, update_document
from errors import NotAuthenticated, NotFound, RateLimited, ValidationFailed

logger = logging.getLogger(__name__)

LEDGERS = {
    "support": ("supported_by", "support_count"),
    "up": ("upvoted_by", "upvote_count"),
    "down": ("downvoted_by", "downvote_count"),
}

OPPOSITE = {"up": "down", "down": "up"}

MAX_ATTEMPTS = 5


class VoteDebouncer:
    """Process-wide throttle: one vote per item id per window.

    Guards against double-submits from rapid clicks. It is local to this
    process and says nothing about correctness.
    """

    def __init__(self, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.window = window_seconds
        self.clock = clock
        self._last: Dict[str, float] = {}
        self._lock = threading.Lock()

    def allow(self, item_id: str) -> bool:
        with self._lock:
            now = self.clock()
            # entries outside the window can never block again
            self._last = {k: t for k, t in self._last.items() if now - t < self.window}
            if item_id in self._last:
                return False
            self._last[item_id] = now
            return True

    def reset(self) -> None:
        with self._lock:
            self._last.clear()


debouncer = VoteDebouncer(int(os.getenv("VOTE_DEBOUNCE_MS", "300")) / 1000.0)


def apply_vote(
    collection: str,
    item_id: str,
    user_id: str,
    direction: str,
    allowed: Iterable[str] = ("support",),
) -> bool:
    """Toggle `user_id` in the `direction` ledger of one item.

    Returns True when the user is now counted in that direction, False when
    the call undid an existing vote. A dual-direction item moves the user out
    of the opposite ledger in the same write.
    """
    if not user_id:
        raise NotAuthenticated()
    if direction not in allowed:
        raise ValidationFailed(f"Unsupported vote direction: {direction}")

    voted_by, count = LEDGERS[direction]
    opposite = OPPOSITE.get(direction) if OPPOSITE.get(direction) in allowed else None

    for _ in range(MAX_ATTEMPTS):
        item = get_document(collection, item_id)
        if item is None:
            raise NotFound()

        if user_id in item.get(voted_by, []):
            ops = {"$pull": {voted_by: user_id}, "$inc": {count: -1}}
            if update_document(collection, item_id, ops, {voted_by: user_id}):
                return False
            continue

        ops = {"$addToSet": {voted_by: user_id}, "$inc": {count: 1}}
        conditions = {voted_by: {"$ne": user_id}}
        if opposite:
            other_by, other_count = LEDGERS[opposite]
            if user_id in item.get(other_by, []):
                ops["$pull"] = {other_by: user_id}
                ops["$inc"][other_count] = -1
                conditions[other_by] = user_id
            else:
                conditions[other_by] = {"$ne": user_id}
        if update_document(collection, item_id, ops, conditions):
            return True

        logger.debug("Vote on %s/%s raced with another write, retrying", collection, item_id)

    raise RateLimited("This item is getting a lot of votes right now, try again")
