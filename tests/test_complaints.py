"""Tests for the complaint lifecycle."""

import pytest

from complaints import (
    create_anonymous_complaint,
    create_department_complaint,
    list_anonymous_complaints,
    list_department_complaints_by_department,
    update_complaint_status,
    update_department_complaint_status,
)
from database import get_document
from departments import create_department
from errors import Forbidden, NotFound, ValidationFailed
from schemas import AnonymousComplaintCreate, DepartmentComplaintCreate


@pytest.fixture
def campus(make_user):
    admin = make_user("Dean", role="admin")
    create_department(admin, "cse", "Computer Science")
    create_department(admin, "MECH", "Mechanical")
    return {
        "admin": admin,
        "cse_head": make_user("Cse Head", role="department_head", department="CSE"),
        "mech_head": make_user("Mech Head", role="department_head", department="MECH"),
        "student": make_user("Student"),
    }


def _anonymous():
    return create_anonymous_complaint(
        AnonymousComplaintCreate(title="Ragging", description="Seniors in hostel B", category="Safety", severity="High")
    )


def _department(actor, department="CSE"):
    return create_department_complaint(
        actor,
        DepartmentComplaintCreate(department=department, title="Lab PCs", description="Half are broken", category="Infrastructure"),
    )


class TestAnonymousComplaints:
    def test_created_open_without_submitter(self, campus) -> None:
        complaint = _anonymous()
        assert complaint["status"] == "Open"
        assert complaint["resolved"] is False
        stored = get_document("anonymouscomplaint", complaint["id"])
        assert not any(key in stored for key in ("author_id", "submitter_id"))

    def test_admin_resolves(self, campus) -> None:
        complaint = _anonymous()
        updated = update_complaint_status(campus["admin"], complaint["id"], "Resolved", "Warden informed")
        assert updated["status"] == "Resolved"
        assert updated["resolved"] is True
        assert updated["resolved_by"] == "Dean"
        assert updated["resolved_at"] is not None
        assert updated["admin_notes"] == "Warden informed"

    def test_reopen_is_allowed(self, campus) -> None:
        complaint = _anonymous()
        update_complaint_status(campus["admin"], complaint["id"], "Closed")
        updated = update_complaint_status(campus["admin"], complaint["id"], "Under Review")
        assert updated["status"] == "Under Review"
        assert updated["resolved"] is False
        assert updated["resolved_by"] is None

    def test_heads_and_students_cannot_triage(self, campus) -> None:
        complaint = _anonymous()
        for actor in (campus["cse_head"], campus["student"]):
            with pytest.raises(Forbidden):
                update_complaint_status(actor, complaint["id"], "Resolved")
        assert get_document("anonymouscomplaint", complaint["id"])["status"] == "Open"

    def test_authorization_checked_before_status(self, campus) -> None:
        complaint = _anonymous()
        with pytest.raises(Forbidden):
            update_complaint_status(campus["student"], complaint["id"], "Bogus")

    def test_unknown_status(self, campus) -> None:
        with pytest.raises(ValidationFailed):
            update_complaint_status(campus["admin"], _anonymous()["id"], "In Progress")

    def test_missing(self, campus) -> None:
        with pytest.raises(NotFound):
            update_complaint_status(campus["admin"], "64b7f0000000000000000000", "Closed")

    def test_listing_is_admin_only(self, campus) -> None:
        _anonymous()
        assert len(list_anonymous_complaints(campus["admin"])) == 1
        with pytest.raises(Forbidden):
            list_anonymous_complaints(campus["student"])


class TestDepartmentComplaints:
    def test_created_pending(self, campus) -> None:
        complaint = _department(campus["student"], "cse")
        assert complaint["status"] == "Pending"
        assert complaint["department"] == "CSE"
        assert complaint["submitter_id"] == campus["student"].id

    def test_unknown_department(self, campus) -> None:
        with pytest.raises(ValidationFailed):
            _department(campus["student"], "ARTS")

    def test_head_triages_own_department_only(self, campus) -> None:
        complaint = _department(campus["student"], "CSE")
        updated = update_department_complaint_status(campus["cse_head"], complaint["id"], "Resolved", "Replaced 10 PCs")
        assert updated["resolved"] is True
        assert updated["resolved_by"] == "Cse Head"
        with pytest.raises(Forbidden):
            update_department_complaint_status(campus["mech_head"], complaint["id"], "Closed")

    def test_admin_triages_any_department(self, campus) -> None:
        complaint = _department(campus["student"], "MECH")
        updated = update_department_complaint_status(campus["admin"], complaint["id"], "In Progress")
        assert updated["status"] == "In Progress"

    def test_listing_scoped_by_department(self, campus) -> None:
        _department(campus["student"], "CSE")
        _department(campus["student"], "MECH")
        assert len(list_department_complaints_by_department(campus["admin"])) == 2
        assert [c["department"] for c in list_department_complaints_by_department(campus["admin"], "mech")] == ["MECH"]
        assert [c["department"] for c in list_department_complaints_by_department(campus["cse_head"])] == ["CSE"]
        with pytest.raises(Forbidden):
            list_department_complaints_by_department(campus["cse_head"], "MECH")
        with pytest.raises(Forbidden):
            list_department_complaints_by_department(campus["student"])
