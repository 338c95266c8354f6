"""
Departments and their heads.
"""

import logging
from typing import List, Optional

from auth import Actor
from database import create_document, get_document, get_documents, to_public, update_document
from engagement import require_text
from errors import NotFound, ValidationFailed
from moderation import require_admin
from schemas import Department

logger = logging.getLogger(__name__)

COLLECTION = "department"


def _normalize_code(code: Optional[str]) -> str:
    return require_text(code, "Department").upper()


def find_department(code: str) -> Optional[dict]:
    found = get_documents(COLLECTION, {"code": code, "is_active": True}, 1)
    return found[0] if found else None


def _find_any(code: str) -> Optional[dict]:
    found = get_documents(COLLECTION, {"code": code}, 1)
    return found[0] if found else None


def require_department(code: Optional[str]) -> dict:
    code = _normalize_code(code)
    department = find_department(code)
    if department is None:
        raise ValidationFailed(f"Unknown department: {code}")
    return department


def create_department(actor: Actor, code: str, name: str, description: Optional[str] = None) -> dict:
    require_admin(actor)
    code = _normalize_code(code)
    if _find_any(code):
        raise ValidationFailed(f"Department {code} already exists")
    department = Department(code=code, name=require_text(name, "Name"), description=description)
    department_id = create_document(COLLECTION, department)
    logger.info("Department %s created by %s", code, actor.id)
    return to_public(get_document(COLLECTION, department_id))


def list_departments() -> List[dict]:
    return [to_public(d) for d in get_documents(COLLECTION, {"is_active": True}, sort=[("code", 1)])]


def assign_department_head(actor: Actor, user_id: str, department: str) -> dict:
    require_admin(actor)
    code = require_department(department)["code"]
    if not update_document("user", user_id, {"$set": {"role": "department_head", "department": code}}):
        raise NotFound("User not found")
    logger.info("User %s made head of %s by %s", user_id, code, actor.id)
    return to_public(get_document("user", user_id))


def update_department(
    actor: Actor,
    code: str,
    name: Optional[str] = None,
    description: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> dict:
    """Edit a department. Deactivating hides it from listings and new complaints."""
    require_admin(actor)
    department = _find_any(_normalize_code(code))
    if department is None:
        raise NotFound("Department not found")
    changes = {}
    if name is not None:
        changes["name"] = require_text(name, "Name")
    if description is not None:
        changes["description"] = description
    if is_active is not None:
        changes["is_active"] = is_active
    if changes:
        update_document(COLLECTION, department["_id"], {"$set": changes})
        logger.info("Department %s updated by %s: %s", department["code"], actor.id, sorted(changes))
    return to_public(get_document(COLLECTION, department["_id"]))


def list_department_heads(department: Optional[str] = None) -> List[dict]:
    filter_dict = {"role": "department_head"}
    if department:
        filter_dict["department"] = _normalize_code(department)
    return [to_public(u) for u in get_documents("user", filter_dict, sort=[("department", 1), ("name", 1)])]


def remove_department_head(actor: Actor, user_id: str) -> dict:
    require_admin(actor)
    user = get_document("user", user_id)
    if user is None:
        raise NotFound("User not found")
    if user.get("role") != "department_head":
        raise ValidationFailed("User is not a department head")
    update_document("user", user_id, {"$set": {"role": "user", "department": None}})
    logger.info("User %s removed as head of %s by %s", user_id, user.get("department"), actor.id)
    return to_public(get_document("user", user_id))
