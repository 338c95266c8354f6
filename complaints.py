"""
Complaint lifecycle for anonymous and department complaints.

Statuses move Open/Pending -> Under Review/In Progress -> Resolved -> Closed,
but any listed status may follow any other; triagers can reopen resolved or
closed complaints. Moving into Resolved records who resolved it and when.
"""

import logging
from typing import List, Optional

from auth import Actor
from database import create_document, get_document, get_documents, now_utc, to_public, update_document
from departments import require_department
from engagement import require_text
from errors import Forbidden, NotFound, ValidationFailed
from moderation import require_admin, require_triage
from schemas import AnonymousComplaint, AnonymousComplaintCreate, DepartmentComplaint, DepartmentComplaintCreate

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymouscomplaint"
DEPARTMENT = "departmentcomplaint"

STATUSES = {
    ANONYMOUS: ("Open", "Under Review", "Resolved", "Closed"),
    DEPARTMENT: ("Pending", "In Progress", "Resolved", "Closed"),
}


def _transition(collection: str, actor: Actor, complaint_id: str, status: str, notes: Optional[str]) -> dict:
    complaint = get_document(collection, complaint_id)
    if complaint is None:
        raise NotFound("Complaint not found")
    actor = require_triage(actor, complaint)
    if status not in STATUSES[collection]:
        raise ValidationFailed(f"Unknown status: {status}")

    changes = {"status": status, "resolved": status == "Resolved"}
    if notes and notes.strip():
        changes["admin_notes"] = notes.strip()
    if status == "Resolved":
        changes["resolved_by"] = actor.display_name
        changes["resolved_at"] = now_utc()
    else:
        changes["resolved_by"] = None
        changes["resolved_at"] = None

    if not update_document(collection, complaint_id, {"$set": changes}):
        raise NotFound("Complaint not found")
    logger.info(
        "Complaint %s/%s moved %s -> %s by %s",
        collection, complaint_id, complaint.get("status"), status, actor.id,
    )
    return to_public(get_document(collection, complaint_id))


# ----------------- Anonymous -----------------

def create_anonymous_complaint(payload: AnonymousComplaintCreate) -> dict:
    """File a complaint without any reference to who sent it."""
    complaint = AnonymousComplaint(
        title=require_text(payload.title, "Title"),
        description=require_text(payload.description, "Description"),
        category=require_text(payload.category, "Category"),
        severity=payload.severity,
        contact_phone=payload.contact_phone,
    )
    complaint_id = create_document(ANONYMOUS, complaint)
    return to_public(get_document(ANONYMOUS, complaint_id))


def list_anonymous_complaints(actor: Actor) -> List[dict]:
    require_admin(actor)
    return [to_public(d) for d in get_documents(ANONYMOUS, sort=[("created_at", -1)])]


def update_complaint_status(actor: Actor, complaint_id: str, status: str, notes: Optional[str] = None) -> dict:
    return _transition(ANONYMOUS, actor, complaint_id, status, notes)


# ----------------- Department -----------------

def create_department_complaint(actor: Actor, payload: DepartmentComplaintCreate) -> dict:
    department = require_department(payload.department)
    complaint = DepartmentComplaint(
        department=department["code"],
        title=require_text(payload.title, "Title"),
        description=require_text(payload.description, "Description"),
        category=require_text(payload.category, "Category"),
        severity=payload.severity,
        submitter_id=actor.id,
        submitter_name=payload.submitter_name,
        submitter_email=payload.submitter_email,
    )
    complaint_id = create_document(DEPARTMENT, complaint)
    return to_public(get_document(DEPARTMENT, complaint_id))


def list_department_complaints_by_department(actor: Actor, department: Optional[str] = None) -> List[dict]:
    """Admins see every department (or the one asked for); heads see their own."""
    code = department.strip().upper() if department else None
    if actor.is_department_head:
        if not actor.department or (code and code != actor.department):
            raise Forbidden("You can only view complaints for your own department")
        code = actor.department
    elif not actor.is_admin:
        raise Forbidden("Only admins and department heads can view department complaints")

    filter_dict = {"department": code} if code else {}
    return [to_public(d) for d in get_documents(DEPARTMENT, filter_dict, sort=[("created_at", -1)])]


def update_department_complaint_status(
    actor: Actor, complaint_id: str, status: str, notes: Optional[str] = None
) -> dict:
    return _transition(DEPARTMENT, actor, complaint_id, status, notes)
