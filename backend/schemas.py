from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Any, List, Optional

from models import TaskStatus, UserRole


class CamelModel(BaseModel):
    """
    Base for every API schema.

    Attributes are snake_case in Python and camelCase on the wire
    (projectId, createdBy, parentCommentId, ...). Either spelling is accepted
    on input.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# User schemas
class UserSummary(CamelModel):
    id: str
    name: str
    email: str


class MemberSummary(UserSummary):
    role: UserRole = UserRole.member


class User(MemberSummary):
    created_at: Optional[datetime] = None


# Auth schemas
class SignupRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthResponse(CamelModel):
    user: UserSummary
    token: str


class UserInfoResponse(CamelModel):
    user: User


class MemberListResponse(CamelModel):
    success: bool = True
    count: int
    data: List[User]


# Generic envelopes
class MessageResponse(CamelModel):
    success: bool = True
    message: str


# Project schemas
class ProjectCreate(CamelModel):
    # Validated by the service so an empty name reports a clear message
    name: Optional[str] = None
    description: Optional[str] = None
    # Member emails; unknown emails are dropped
    members: List[str] = Field(default_factory=list)


class ProjectUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None


class AddMemberRequest(CamelModel):
    member_email: Optional[str] = None


class Project(CamelModel):
    id: str
    name: str
    description: str = ""
    members: List[MemberSummary] = Field(default_factory=list)
    created_by: Optional[MemberSummary] = Field(None, validation_alias="creator")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProjectEnvelope(CamelModel):
    success: bool = True
    data: Project


class ProjectResponse(CamelModel):
    project: Project


class Pagination(CamelModel):
    total: int
    page: int
    pages: int
    limit: int


class ProjectListResponse(CamelModel):
    success: bool = True
    data: List[Project]
    pagination: Pagination


class AddMemberResponse(CamelModel):
    success: bool = True
    message: str
    project: Project


# Task schemas
class TaskCreate(CamelModel):
    project_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    assignee: Optional[str] = None
    # Parsed leniently; unparseable values are dropped
    due_date: Optional[Any] = None
    # Invalid or missing values fall back to "To Do"
    status: Optional[str] = None


class TaskUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    assignee: Optional[str] = None
    due_date: Optional[Any] = None
    status: Optional[str] = None


class ReorderEntry(CamelModel):
    id: str
    # NaN/Infinity can't be stored in a NOT NULL float column
    order: float = Field(..., allow_inf_nan=False)
    status: Optional[str] = None


class ReorderRequest(CamelModel):
    tasks: List[ReorderEntry] = Field(default_factory=list)


class Task(CamelModel):
    id: str
    project_id: str
    title: str
    description: str = ""
    assignee: Optional[UserSummary] = None
    due_date: Optional[datetime] = None
    status: TaskStatus = TaskStatus.todo
    order: float = 0
    created_by: Optional[UserSummary] = Field(None, validation_alias="creator")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TaskResponse(CamelModel):
    task: Task


class TaskListResponse(CamelModel):
    tasks: List[Task]


class ReorderResponse(CamelModel):
    success: bool = True
    message: str
    tasks: List[Task]


# Comment schemas
class CommentCreate(CamelModel):
    content: Optional[str] = None
    parent_comment_id: Optional[str] = None


class CommentUpdate(CamelModel):
    content: Optional[str] = None


class Comment(CamelModel):
    id: str
    task_id: str
    # Author, expanded
    user_id: Optional[UserSummary] = Field(None, validation_alias="author")
    content: str
    parent_comment_id: Optional[str] = None
    is_edited: bool = False
    edited_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CommentResponse(CamelModel):
    comment: Comment


class CommentListResponse(CamelModel):
    comments: List[Comment]
