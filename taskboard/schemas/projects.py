import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from taskboard.models.enums import ProjectRole, ProjectStatus, ProjectVisibility
from taskboard.schemas.common import Pagination

class ProjectCreateIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    key: str = Field(min_length=1, max_length=10, pattern=r"^[A-Za-z0-9]+$")
    description: str = Field(min_length=1, max_length=500)
    visibility: ProjectVisibility = ProjectVisibility.team
    tags: list[str] = Field(default_factory=list)
    project_lead_id: uuid.UUID | None = None
    member_ids: list[uuid.UUID] = Field(default_factory=list)

class ProjectUpdateIn(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=500)
    status: ProjectStatus | None = None
    visibility: ProjectVisibility | None = None
    tags: list[str] | None = None

class MemberIn(BaseModel):
    user_id: uuid.UUID
    role: ProjectRole = ProjectRole.member

class MemberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: uuid.UUID
    role: ProjectRole
    joined_at: datetime | None = None

class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    organization_id: uuid.UUID
    name: str
    key: str
    description: str
    owner_id: uuid.UUID
    created_by_id: uuid.UUID
    project_lead_id: uuid.UUID | None
    status: ProjectStatus
    visibility: ProjectVisibility
    tags: list[str]
    members: list[MemberOut]
    created_at: datetime | None = None
    updated_at: datetime | None = None

class ProjectList(BaseModel):
    projects: list[ProjectOut]
    pagination: Pagination
