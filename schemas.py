"""
Database Schemas for the Campus Pulse API

Each Pydantic model represents a MongoDB collection. The collection name is the
lowercased class name. Example: class MindWallIssue -> "mindwallissue".

Embedded shapes (Comment, Participant) live inside their parent document, and
the *Create models are the payloads clients send to create documents.
"""

from datetime import date, time, datetime
from pydantic import BaseModel, Field
from typing import List, Optional, Literal

Role = Literal["user", "moderator", "admin", "department_head"]
PostKind = Literal["activity", "concern", "general"]
Visibility = Literal["public", "moderators-only"]
ConcernStatus = Literal["new", "reviewing", "resolved"]
Severity = Literal["Low", "Medium", "High", "Critical"]

# Core user with role-tier based access
class User(BaseModel):
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")
    avatar_url: Optional[str] = Field(None, description="Profile image URL")
    role: Role = Field("user", description="Role tier for permissions")
    department: Optional[str] = Field(None, description="Department code for department heads")

# Embedded in Post.comments / MindWallIssue.comments
class Comment(BaseModel):
    id: str = Field(..., description="Client-generated time-based id")
    author_id: str = Field(..., description="Always recorded, even when shown anonymously")
    author_display_name: str
    text: str
    is_anonymous: bool = False
    created_at: datetime

# Embedded in Post.participants, keyed by uid
class Participant(BaseModel):
    uid: str
    display_name: str
    joined_at: datetime

class Post(BaseModel):
    kind: PostKind = Field(..., description="activity | concern | general")
    author_id: str = Field(..., description="User ID of author")
    author_name: str = Field(..., description="Shown name, anonymized for anonymous concerns")
    content: str = Field("", description="Post text content")
    category: str = Field(..., description="Free-text tag")
    visibility: Visibility = "public"
    # up/down ledger
    upvote_count: int = 0
    upvoted_by: List[str] = Field(default_factory=list)
    downvote_count: int = 0
    downvoted_by: List[str] = Field(default_factory=list)
    # single-direction support ledger
    support_count: int = 0
    supported_by: List[str] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    # concern-only
    is_anonymous: bool = False
    status: Optional[ConcernStatus] = None
    # activity-only
    location: Optional[str] = None
    scheduled_date: Optional[str] = Field(None, description="ISO date, e.g. 2025-03-14")
    scheduled_time: Optional[str] = Field(None, description="ISO time, e.g. 18:30:00")
    max_participants: Optional[int] = Field(None, gt=0, description="Absent means unlimited")
    participants: List[Participant] = Field(default_factory=list)

class PostCreate(BaseModel):
    kind: PostKind = "general"
    content: str = ""
    category: str = ""
    visibility: Visibility = "public"
    is_anonymous: bool = False
    location: Optional[str] = None
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[time] = None
    max_participants: Optional[int] = Field(None, gt=0)

class MindWallIssue(BaseModel):
    title: str
    description: str
    category: str
    severity: Severity = "Low"
    author_id: str
    support_count: int = 0
    supported_by: List[str] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)

class MindWallIssueCreate(BaseModel):
    title: str = ""
    description: str = ""
    category: str = ""
    severity: Severity = "Low"

class CommentCreate(BaseModel):
    text: str
    as_anonymous: bool = False

# Complaints. Anonymous complaints never reference their submitter.
class AnonymousComplaint(BaseModel):
    title: str
    description: str
    category: str
    severity: Severity = "Low"
    status: Literal["Open", "Under Review", "Resolved", "Closed"] = "Open"
    resolved: bool = False
    contact_phone: Optional[str] = Field(None, description="Only returned to triagers")
    admin_notes: Optional[str] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None

class AnonymousComplaintCreate(BaseModel):
    title: str = ""
    description: str = ""
    category: str = ""
    severity: Severity = "Low"
    contact_phone: Optional[str] = None

class DepartmentComplaint(BaseModel):
    department: str = Field(..., description="Department code")
    title: str
    description: str
    category: str
    severity: Severity = "Low"
    status: Literal["Pending", "In Progress", "Resolved", "Closed"] = "Pending"
    resolved: bool = False
    submitter_id: Optional[str] = None
    submitter_name: Optional[str] = None
    submitter_email: Optional[str] = None
    admin_notes: Optional[str] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None

class DepartmentComplaintCreate(BaseModel):
    department: str = ""
    title: str = ""
    description: str = ""
    category: str = ""
    severity: Severity = "Low"
    submitter_name: Optional[str] = None
    submitter_email: Optional[str] = None

class Department(BaseModel):
    code: str = Field(..., description="Short department code, e.g. CSE")
    name: str
    description: Optional[str] = None
    is_active: bool = True

# Append-only audit log of moderator grants
class ModeratorGrant(BaseModel):
    user_id: str
    name: str
    email: str
    added_by: str = Field(..., description="Admin user ID who granted the role")
    added_at: datetime
    is_active: bool = True
    revoked_by: Optional[str] = None
