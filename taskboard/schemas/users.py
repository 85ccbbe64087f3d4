import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from taskboard.models.enums import ProjectRole, Role
from taskboard.schemas.common import Pagination

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    organization_id: uuid.UUID
    email: str
    name: str | None
    role: Role
    is_active: bool
    is_approved: bool
    created_at: datetime | None = None

class ProfileUpdateIn(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    email: EmailStr | None = None

class UserList(BaseModel):
    users: list[UserOut]
    pagination: Pagination

class TeamMemberOut(BaseModel):
    user_id: uuid.UUID
    project_role: ProjectRole
    joined_at: datetime | None

class TeamOut(BaseModel):
    project_id: uuid.UUID
    project_name: str
    project_key: str
    project_status: str
    user_role_in_project: ProjectRole
    owner_id: uuid.UUID
    members: list[TeamMemberOut]
    member_count: int

class TeamsOut(BaseModel):
    teams: list[TeamOut]
    total_teams: int
    user_role: Role

class TeamStatsOut(BaseModel):
    project_count: int
    total_tasks: int
    assigned_tasks: int
    completed_tasks: int
    completion_rate: int
