from sqlalchemy import Column, String, Text, ForeignKey, DateTime, Boolean, Float, Table, Enum
from sqlalchemy.orm import relationship
import enum

from database import Base, new_object_id
from time_utils import utc_now


class UserRole(str, enum.Enum):
    owner = "owner"
    member = "member"


class TaskStatus(str, enum.Enum):
    todo = "To Do"
    in_progress = "In Progress"
    done = "Done"


# Project membership (User N <-> N Project)
project_members = Table(
    "project_members",
    Base.metadata,
    Column("project_id", String(24), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String(24), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id = Column(String(24), primary_key=True, default=new_object_id)
    name = Column(String(255), nullable=False)
    # Always stored lowercase
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.member,
    )
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Relationships
    projects = relationship("Project", secondary=project_members, back_populates="members")


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(24), primary_key=True, default=new_object_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    created_by = Column(String(24), ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Relationships
    creator = relationship("User", foreign_keys=[created_by])
    members = relationship("User", secondary=project_members, back_populates="projects")


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(24), primary_key=True, default=new_object_id)
    # Tasks are not removed when their project is deleted, so no DB-level cascade
    project_id = Column(String(24), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    assignee_id = Column(String(24), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(
        Enum(TaskStatus, name="task_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=TaskStatus.todo,
    )
    order = Column(Float, nullable=False, default=0)
    created_by = Column(String(24), ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Relationships
    assignee = relationship("User", foreign_keys=[assignee_id])
    creator = relationship("User", foreign_keys=[created_by])


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String(24), primary_key=True, default=new_object_id)
    task_id = Column(String(24), nullable=False, index=True)
    user_id = Column(String(24), ForeignKey("users.id", ondelete="SET NULL"))
    content = Column(Text, nullable=False)
    # One level of replies; deleting a comment removes its direct replies only
    parent_comment_id = Column(String(24), nullable=True, index=True)
    is_edited = Column(Boolean, nullable=False, default=False)
    edited_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Relationships
    author = relationship("User", foreign_keys=[user_id])
