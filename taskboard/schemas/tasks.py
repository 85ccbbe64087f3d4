import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from taskboard.models.enums import DependencyType, TaskPriority, TaskStatus, TaskType
from taskboard.schemas.common import Pagination

class DependencyIn(BaseModel):
    task_id: uuid.UUID
    type: DependencyType = DependencyType.relates_to

class TaskCreateIn(BaseModel):
    project_id: uuid.UUID
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    assignee_id: uuid.UUID | None = None
    status: TaskStatus = TaskStatus.todo
    priority: TaskPriority = TaskPriority.medium
    type: TaskType = TaskType.task
    due_date: datetime | None = None
    estimated_hours: float | None = Field(default=None, ge=0, le=1000)
    labels: list[str] = Field(default_factory=list)

class TaskUpdateIn(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=2000)
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    type: TaskType | None = None
    assignee_id: uuid.UUID | None = None
    due_date: datetime | None = None
    estimated_hours: float | None = Field(default=None, ge=0, le=1000)
    labels: list[str] | None = None

class TaskStatusIn(BaseModel):
    status: TaskStatus

class CommentIn(BaseModel):
    content: str = Field(min_length=1, max_length=1000)

class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    author_id: uuid.UUID | None
    content: str
    is_edited: bool
    created_at: datetime | None = None

class DependencyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    depends_on_id: uuid.UUID
    type: DependencyType

class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    organization_id: uuid.UUID
    project_id: uuid.UUID
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    type: TaskType
    reporter_id: uuid.UUID
    assignee_id: uuid.UUID | None
    due_date: datetime | None
    estimated_hours: float | None
    labels: list[str]
    completed_at: datetime | None
    comments: list[CommentOut]
    dependencies: list[DependencyOut]
    created_at: datetime | None = None
    updated_at: datetime | None = None

class TaskList(BaseModel):
    tasks: list[TaskOut]
    pagination: Pagination
