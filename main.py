import os
import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from typing import Literal, Optional

import database
import complaints
import departments
import mindwall
import participation
import posts
import roles
import sweeper
from auth import Actor, current_actor
from database import create_document, get_document, to_public
from errors import CampusError
from moderation import require_moderator
from schemas import (
    User,
    PostCreate,
    MindWallIssueCreate,
    CommentCreate,
    AnonymousComplaintCreate,
    DepartmentComplaintCreate,
)

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger("campus")


def sweeper_enabled() -> bool:
    if os.getenv("EXPIRY_SWEEP_ENABLED", "1").lower() in ("0", "false", "no"):
        return False
    if database.db is None:
        logger.warning("Database not configured, expiry sweeper not started")
        return False
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    task = asyncio.create_task(sweeper.run_periodically()) if sweeper_enabled() else None
    yield
    if task is not None:
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task


app = FastAPI(title="Campus Pulse API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CampusError)
async def campus_error_handler(request, exc: CampusError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/")
def read_root():
    return {"message": "Campus Pulse API is running"}

@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": []
    }
    db = database.db
    if db is None:
        return response
    response["connection_status"] = "Connected"
    try:
        response["collections"] = db.list_collection_names()[:10]
        response["database"] = "✅ Connected & Working"
    except Exception as e:
        response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
    return response

# ----------------- Expiry sweeper -----------------

@app.post("/api/maintenance/expiry-sweep")
def run_expiry_sweep_once(actor: Actor = Depends(current_actor)):
    require_moderator(actor)
    return {"deleted": sweeper.sweep_once()}

# ----------------- Request bodies -----------------

class VoteRequest(BaseModel):
    direction: Literal["up", "down", "support"]

class StatusUpdateRequest(BaseModel):
    status: str
    notes: Optional[str] = None

class ModeratorRequest(BaseModel):
    user_id: str

class DepartmentRequest(BaseModel):
    code: str = Field(..., description="Short department code")
    name: str
    description: Optional[str] = None

class DepartmentUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None

class DepartmentHeadRequest(BaseModel):
    user_id: str

# ----------------- Users & roles -----------------

@app.post("/api/users")
def create_user(user: User):
    # self-registration always starts at the lowest tier
    user = user.model_copy(update={"role": "user", "department": None})
    user_id = create_document("user", user)
    return to_public(get_document("user", user_id))

@app.get("/api/users/{user_id}/role")
def get_user_role(user_id: str):
    return {"user_id": user_id, "role": roles.get_user_role(user_id)}

@app.get("/api/moderators")
def list_moderators(actor: Actor = Depends(current_actor)):
    return roles.list_moderators()

@app.post("/api/moderators")
def add_moderator(req: ModeratorRequest, actor: Actor = Depends(current_actor)):
    return roles.add_moderator(actor, req.user_id)

@app.delete("/api/moderators/{user_id}")
def remove_moderator(user_id: str, actor: Actor = Depends(current_actor)):
    return {"revoked": roles.remove_moderator(actor, user_id)}

# ----------------- Departments -----------------

@app.get("/api/departments")
def list_departments():
    return departments.list_departments()

@app.get("/api/departments/heads")
def list_department_heads(department: Optional[str] = None, actor: Actor = Depends(current_actor)):
    return departments.list_department_heads(department)

@app.delete("/api/departments/heads/{user_id}")
def remove_department_head(user_id: str, actor: Actor = Depends(current_actor)):
    return departments.remove_department_head(actor, user_id)

@app.post("/api/departments")
def create_department(req: DepartmentRequest, actor: Actor = Depends(current_actor)):
    return departments.create_department(actor, req.code, req.name, req.description)

@app.patch("/api/departments/{code}")
def update_department(code: str, req: DepartmentUpdateRequest, actor: Actor = Depends(current_actor)):
    return departments.update_department(actor, code, req.name, req.description, req.is_active)

@app.post("/api/departments/{code}/head")
def assign_department_head(code: str, req: DepartmentHeadRequest, actor: Actor = Depends(current_actor)):
    return departments.assign_department_head(actor, req.user_id, code)

# ----------------- Posts -----------------

@app.post("/api/posts")
def create_post(payload: PostCreate, actor: Actor = Depends(current_actor)):
    return posts.create_post(actor, payload)

@app.get("/api/posts")
def list_posts(kind: Optional[Literal["activity", "concern", "general"]] = None, actor: Actor = Depends(current_actor)):
    return posts.list_posts(actor, kind)

@app.get("/api/posts/{post_id}")
def get_post(post_id: str, actor: Actor = Depends(current_actor)):
    return posts.get_post(post_id, actor)

@app.post("/api/posts/{post_id}/votes")
def vote_post(post_id: str, req: VoteRequest, actor: Actor = Depends(current_actor)):
    return {"voted": posts.vote_post(actor, post_id, req.direction)}

@app.post("/api/posts/{post_id}/comments")
def add_comment(post_id: str, comment: CommentCreate, actor: Actor = Depends(current_actor)):
    return posts.add_comment(actor, post_id, comment.text, comment.as_anonymous)

@app.post("/api/posts/{post_id}/participants")
def join_activity(post_id: str, actor: Actor = Depends(current_actor)):
    return participation.join_activity(actor, post_id)

@app.delete("/api/posts/{post_id}/participants")
def leave_activity(post_id: str, actor: Actor = Depends(current_actor)):
    return {"left": participation.leave_activity(actor, post_id)}

@app.delete("/api/posts/{post_id}")
def delete_post(post_id: str, actor: Actor = Depends(current_actor)):
    posts.delete_post(actor, post_id)
    return {"ok": True}

@app.delete("/api/moderation/posts/{post_id}")
def delete_post_as_moderator(post_id: str, actor: Actor = Depends(current_actor)):
    posts.delete_post_as_moderator(actor, post_id)
    return {"ok": True}

# ----------------- Mind wall -----------------

@app.post("/api/mindwall")
def create_mindwall_issue(payload: MindWallIssueCreate, actor: Actor = Depends(current_actor)):
    return mindwall.create_issue(actor, payload)

@app.get("/api/mindwall")
def list_mindwall_issues(actor: Actor = Depends(current_actor)):
    return mindwall.list_issues(actor)

@app.post("/api/mindwall/{issue_id}/support")
def vote_mindwall_issue(issue_id: str, actor: Actor = Depends(current_actor)):
    # None means the click was dropped by the debounce window
    return {"voted": mindwall.vote_issue(actor, issue_id)}

@app.post("/api/mindwall/{issue_id}/comments")
def add_mindwall_comment(issue_id: str, comment: CommentCreate, actor: Actor = Depends(current_actor)):
    return mindwall.add_issue_comment(actor, issue_id, comment.text, comment.as_anonymous)

@app.delete("/api/mindwall/{issue_id}")
def delete_mindwall_issue(issue_id: str, actor: Actor = Depends(current_actor)):
    mindwall.delete_issue(actor, issue_id)
    return {"ok": True}

# ----------------- Complaints -----------------

@app.post("/api/complaints/anonymous")
def create_anonymous_complaint(payload: AnonymousComplaintCreate, actor: Actor = Depends(current_actor)):
    # signed-in users only, but the complaint never records who sent it
    return complaints.create_anonymous_complaint(payload)

@app.get("/api/complaints/anonymous")
def list_anonymous_complaints(actor: Actor = Depends(current_actor)):
    return complaints.list_anonymous_complaints(actor)

@app.patch("/api/complaints/anonymous/{complaint_id}/status")
def update_complaint_status(complaint_id: str, req: StatusUpdateRequest, actor: Actor = Depends(current_actor)):
    return complaints.update_complaint_status(actor, complaint_id, req.status, req.notes)

@app.post("/api/complaints/department")
def create_department_complaint(payload: DepartmentComplaintCreate, actor: Actor = Depends(current_actor)):
    return complaints.create_department_complaint(actor, payload)

@app.get("/api/complaints/department")
def list_department_complaints(department: Optional[str] = None, actor: Actor = Depends(current_actor)):
    return complaints.list_department_complaints_by_department(actor, department)

@app.patch("/api/complaints/department/{complaint_id}/status")
def update_department_complaint_status(complaint_id: str, req: StatusUpdateRequest, actor: Actor = Depends(current_actor)):
    return complaints.update_department_complaint_status(actor, complaint_id, req.status, req.notes)

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
