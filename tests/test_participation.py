"""Tests for joining and leaving activities."""

import pytest

import participation
from database import get_document
from errors import ActivityFull, AlreadyJoined, NotAnActivity, NotFound
from participation import join_activity, leave_activity
from posts import create_post
from schemas import PostCreate


def _activity(actor, max_participants=None):
    return create_post(
        actor,
        PostCreate(kind="activity", content="Football at 5", category="Sports", max_participants=max_participants),
    )


def _participants(activity):
    return get_document("post", activity["id"])["participants"]


class TestJoin:
    def test_join_records_participant(self, make_user) -> None:
        host, player = make_user(), make_user("Kofi")
        activity = _activity(host)
        joined = join_activity(player, activity["id"])
        assert joined["uid"] == player.id
        assert joined["display_name"] == "Kofi"
        assert [p["uid"] for p in _participants(activity)] == [player.id]

    def test_unlimited_without_cap(self, make_user) -> None:
        activity = _activity(make_user())
        for _ in range(12):
            join_activity(make_user(), activity["id"])
        assert len(_participants(activity)) == 12

    def test_capacity_gate(self, make_user) -> None:
        activity = _activity(make_user(), max_participants=2)
        first, second, third = make_user(), make_user(), make_user()
        join_activity(first, activity["id"])
        join_activity(second, activity["id"])

        with pytest.raises(ActivityFull) as exc:
            join_activity(third, activity["id"])
        assert exc.value.message == "This activity is full"
        with pytest.raises(AlreadyJoined):
            join_activity(second, activity["id"])
        assert [p["uid"] for p in _participants(activity)] == [first.id, second.id]

    def test_double_join(self, make_user) -> None:
        activity = _activity(make_user())
        player = make_user()
        join_activity(player, activity["id"])
        with pytest.raises(AlreadyJoined):
            join_activity(player, activity["id"])
        assert len(_participants(activity)) == 1

    def test_only_activities(self, make_user) -> None:
        post = create_post(make_user(), PostCreate(kind="general", content="hello", category="Social"))
        with pytest.raises(NotAnActivity):
            join_activity(make_user(), post["id"])

    def test_missing_activity(self, make_user) -> None:
        with pytest.raises(NotFound):
            join_activity(make_user(), "64b7f0000000000000000000")

    def test_stale_capacity_read_is_caught_by_write(self, store, make_user, monkeypatch) -> None:
        """Another client fills the last slot between our read and our write."""
        activity = _activity(make_user(), max_participants=1)
        late, rival = make_user(), make_user()
        real_get = participation.get_document
        reads = {"n": 0}

        def rival_sneaks_in(collection, item_id):
            reads["n"] += 1
            doc = real_get(collection, item_id)
            if reads["n"] == 1:
                store["post"].update_one(
                    {"_id": doc["_id"]},
                    {"$push": {"participants": {"uid": rival.id, "display_name": "rival", "joined_at": None}}},
                )
            return doc

        monkeypatch.setattr(participation, "get_document", rival_sneaks_in)
        with pytest.raises(ActivityFull):
            join_activity(late, activity["id"])
        assert [p["uid"] for p in _participants(activity)] == [rival.id]


class TestLeave:
    def test_leave(self, make_user) -> None:
        activity = _activity(make_user())
        a, b = make_user(), make_user()
        join_activity(a, activity["id"])
        join_activity(b, activity["id"])
        assert leave_activity(a, activity["id"]) is True
        assert [p["uid"] for p in _participants(activity)] == [b.id]

    def test_leave_when_absent_is_noop(self, make_user) -> None:
        activity = _activity(make_user())
        assert leave_activity(make_user(), activity["id"]) is False

    def test_leave_frees_a_slot(self, make_user) -> None:
        activity = _activity(make_user(), max_participants=1)
        a, b = make_user(), make_user()
        join_activity(a, activity["id"])
        leave_activity(a, activity["id"])
        join_activity(b, activity["id"])
        assert [p["uid"] for p in _participants(activity)] == [b.id]
